from .account_security_service import AccountSecurityService
from .config import AccountSecurityConfig

__all__ = ["AccountSecurityConfig", "AccountSecurityService"]
