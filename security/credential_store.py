#!/usr/bin/env python3
"""
SQLSync Credential Store - encrypted database credentials

Connection definitions name a credential reference instead of carrying a
user and password. References resolve against:

1. an encrypted file of {ref: {user, password}} (Fernet, key derived from
   SQLSYNC_MASTER_KEY with PBKDF2-HMAC-SHA256), written owner-only
2. environment variables SQLSYNC_CRED_<REF>_USER / SQLSYNC_CRED_<REF>_PASSWORD
"""

import base64
import json
import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from core.errors import CredentialError
from core.models import Credential

logger = logging.getLogger(__name__)

KDF_SALT = b'sqlsync_credentials_salt'
KDF_ITERATIONS = 100000


def env_prefix(ref: str) -> str:
    """SQLSYNC_CRED_<REF> with non-alphanumerics folded to underscores"""
    return "SQLSYNC_CRED_" + re.sub(r'[^A-Za-z0-9]', '_', ref).upper()


class CredentialStore:
    """Encrypted credential storage with environment fallback"""

    def __init__(self, credentials_file: Optional[str] = None, master_key: Optional[str] = None):
        self.credentials_file = Path(credentials_file) if credentials_file else None
        self.master_key = master_key or os.getenv("SQLSYNC_MASTER_KEY")
        self.cipher_suite = self._initialize_encryption() if self.master_key else None
        self.credentials: Dict[str, Dict[str, Optional[str]]] = {}
        self._load()

    def _initialize_encryption(self) -> Fernet:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=KDF_SALT,
            iterations=KDF_ITERATIONS,
        )
        key = base64.urlsafe_b64encode(kdf.derive(self.master_key.encode()))
        return Fernet(key)

    def _load(self):
        if not self.credentials_file or not self.credentials_file.exists():
            return
        if self.cipher_suite is None:
            logger.warning(f"Credential file {self.credentials_file} present but SQLSYNC_MASTER_KEY is not set")
            return

        encrypted_data = self.credentials_file.read_bytes()
        if not encrypted_data:
            return
        try:
            decrypted_data = self.cipher_suite.decrypt(encrypted_data)
        except InvalidToken as e:
            raise CredentialError(
                f"Cannot decrypt {self.credentials_file}: wrong master key or corrupted file",
                {'file': str(self.credentials_file)}
            ) from e
        self.credentials = json.loads(decrypted_data.decode())
        logger.info(f"Loaded {len(self.credentials)} credentials from storage")

    def _save(self):
        """Write the encrypted store with owner-only permissions"""
        if self.credentials_file is None:
            raise CredentialError("No credential file configured")
        if self.cipher_suite is None:
            raise CredentialError("SQLSYNC_MASTER_KEY is required to store credentials")

        self.credentials_file.parent.mkdir(parents=True, exist_ok=True)
        encrypted_data = self.cipher_suite.encrypt(json.dumps(self.credentials).encode())

        fd = os.open(self.credentials_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            os.write(fd, encrypted_data)
        finally:
            os.close(fd)
        os.chmod(self.credentials_file, 0o600)
        logger.debug("Credentials saved to storage with secure permissions")

    def store(self, ref: str, user: Optional[str], password: Optional[str]) -> None:
        self.credentials[ref] = {'user': user, 'password': password}
        self._save()
        logger.info(f"Stored credential: {ref}")

    def delete(self, ref: str) -> bool:
        if ref not in self.credentials:
            return False
        del self.credentials[ref]
        self._save()
        logger.info(f"Deleted credential: {ref}")
        return True

    def list_refs(self) -> List[str]:
        return sorted(self.credentials)

    def resolve(self, ref: Optional[str]) -> Credential:
        """Credential for ref; no reference means no credential (e.g. SQLite)"""
        if not ref:
            return Credential()

        stored = self.credentials.get(ref)
        if stored is not None:
            return Credential(user=stored.get('user'), password=stored.get('password'))

        prefix = env_prefix(ref)
        user = os.getenv(f"{prefix}_USER")
        password = os.getenv(f"{prefix}_PASSWORD")
        if user is not None or password is not None:
            return Credential(user=user, password=password)

        raise CredentialError(
            f"Credential '{ref}' not found in store or environment ({prefix}_USER)",
            {'credential': ref}
        )
