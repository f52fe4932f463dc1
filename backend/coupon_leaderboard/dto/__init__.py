from .certification import CheckEmailCertificationRequest, EmailCertificationRequest

__all__ = ['CheckEmailCertificationRequest', 'EmailCertificationRequest']
