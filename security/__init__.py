from security.credential_store import CredentialStore

__all__ = ['CredentialStore']
