"""Provider credential resolution.

Secrets are read once from the environment and never re-read. Only a short
prefix of each secret is ever exposed, through ``CredentialResolver.diagnostics``.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple


# Adapter name -> environment variables, first non-empty wins.
CREDENTIAL_ENV_VARS: Dict[str, Tuple[str, ...]] = {
    "ark-images": ("ARK_IMAGE_API_KEY", "ARK_API_KEY"),
    "ark-vision": ("ARK_VISION_API_KEY", "ARK_API_KEY"),
    "remove-bg": ("REMOVE_BG_API_KEY", "REMOVEBG_API_KEY"),
}

_PREFIX_CHARS = 4


def redact_secret(secret: Optional[str]) -> Optional[str]:
    if not secret:
        return None
    if len(secret) <= _PREFIX_CHARS * 2:
        return "..."
    return f"{secret[:_PREFIX_CHARS]}..."


@dataclass(frozen=True)
class ProviderCredential:
    name: str
    env_var: str
    secret: str = field(repr=False)

    @property
    def prefix(self) -> Optional[str]:
        return redact_secret(self.secret)


@dataclass(frozen=True)
class CredentialDiagnostic:
    adapter: str
    env_vars: Sequence[str]
    present: bool
    source: Optional[str] = None
    prefix: Optional[str] = None


class CredentialResolver:
    def __init__(self, credentials: Mapping[str, ProviderCredential]) -> None:
        self._credentials: Dict[str, ProviderCredential] = dict(credentials)

    @classmethod
    def from_environ(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        env_vars: Mapping[str, Sequence[str]] = CREDENTIAL_ENV_VARS,
    ) -> "CredentialResolver":
        env = os.environ if environ is None else environ
        credentials: Dict[str, ProviderCredential] = {}
        for adapter, names in env_vars.items():
            for env_var in names:
                value = (env.get(env_var) or "").strip()
                if value:
                    credentials[adapter] = ProviderCredential(name=adapter, env_var=env_var, secret=value)
                    break
        return cls(credentials)

    @classmethod
    def from_secrets(cls, secrets: Mapping[str, str]) -> "CredentialResolver":
        credentials = {
            name: ProviderCredential(name=name, env_var="<explicit>", secret=secret)
            for name, secret in secrets.items()
            if secret
        }
        return cls(credentials)

    def get(self, adapter_name: str) -> Optional[str]:
        credential = self._credentials.get(adapter_name)
        return credential.secret if credential else None

    def credential(self, adapter_name: str) -> Optional[ProviderCredential]:
        return self._credentials.get(adapter_name)

    def diagnostics(self) -> List[CredentialDiagnostic]:
        names = list(CREDENTIAL_ENV_VARS)
        names.extend(name for name in self._credentials if name not in CREDENTIAL_ENV_VARS)
        rows: List[CredentialDiagnostic] = []
        for name in names:
            credential = self._credentials.get(name)
            rows.append(
                CredentialDiagnostic(
                    adapter=name,
                    env_vars=CREDENTIAL_ENV_VARS.get(name, ()),
                    present=credential is not None,
                    source=credential.env_var if credential else None,
                    prefix=credential.prefix if credential else None,
                )
            )
        return rows

    def __repr__(self) -> str:
        return f"CredentialResolver(adapters={sorted(self._credentials)})"


_DEFAULT_RESOLVER: Optional[CredentialResolver] = None
_DEFAULT_LOCK = threading.Lock()


def default_resolver() -> CredentialResolver:
    global _DEFAULT_RESOLVER
    with _DEFAULT_LOCK:
        if _DEFAULT_RESOLVER is None:
            _DEFAULT_RESOLVER = CredentialResolver.from_environ()
        return _DEFAULT_RESOLVER
