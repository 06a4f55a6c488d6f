"""
Application Topology

Which domains a deployment spans, how to reach each one, and which
contract addresses were recorded there.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .errors import ConfigurationError, UnknownDomainError
from .main import (
    Address,
    DomainId,
    ProxiedAddress,
    coerce_domain_keys,
    normalize_address,
)
from .providers import ChainProvider, JsonRpcProvider

logger = logging.getLogger(__name__)


@dataclass
class DomainContracts:
    """Addresses recorded for one domain of the deployment"""
    name: str
    provider: ChainProvider
    proxies: Dict[str, ProxiedAddress] = field(default_factory=dict)
    governed: Dict[str, Address] = field(default_factory=dict)
    validator_manager: Optional[Address] = None
    validators: Dict[DomainId, Address] = field(default_factory=dict)

    def __post_init__(self):
        self.governed = {
            name: normalize_address(address) for name, address in self.governed.items()
        }
        if self.validator_manager is not None:
            self.validator_manager = normalize_address(self.validator_manager)
        self.validators = {
            remote: normalize_address(address)
            for remote, address in coerce_domain_keys(self.validators).items()
        }


class MultiDomainApp:
    """
    A deployment spanning several domains.

    Domains keep the order in which they were registered.
    """

    def __init__(self, domains: Optional[Dict[DomainId, DomainContracts]] = None):
        self._domains: Dict[DomainId, DomainContracts] = dict(domains or {})

    def register_domain(self, domain: DomainId, contracts: DomainContracts) -> None:
        """Register the contracts of a domain"""
        self._domains[domain] = contracts
        logger.info(f"Registered domain {domain} ({contracts.name})")

    @property
    def domains(self) -> List[DomainId]:
        return list(self._domains)

    def must_get_domain(self, domain: DomainId) -> DomainContracts:
        contracts = self._domains.get(domain)
        if contracts is None:
            raise UnknownDomainError(domain)
        return contracts

    def must_get_provider(self, domain: DomainId) -> ChainProvider:
        return self.must_get_domain(domain).provider

    def domain_name(self, domain: DomainId) -> str:
        return self.must_get_domain(domain).name

    def proxies(self, domain: DomainId) -> Dict[str, ProxiedAddress]:
        return dict(self.must_get_domain(domain).proxies)

    def governed(self, domain: DomainId) -> Dict[str, Address]:
        return dict(self.must_get_domain(domain).governed)

    def validator_manager(self, domain: DomainId) -> Optional[Address]:
        return self.must_get_domain(domain).validator_manager

    def validators(self, domain: DomainId) -> Dict[DomainId, Address]:
        return dict(self.must_get_domain(domain).validators)

    @classmethod
    def from_dict(
        cls,
        data: Mapping[Any, Any],
        timeout_ms: int = 10000,
    ) -> "MultiDomainApp":
        """
        Build from the `domains:` section of a deployment file.

        Each entry is keyed by domain id and holds `rpc_url`, and optionally
        `name`, `proxies`, `governed`, `validator_manager` and `validators`.
        """
        app = cls()
        for domain, entry in coerce_domain_keys(data).items():
            if not isinstance(entry, Mapping):
                raise ConfigurationError(f"Domain {domain} entry must be a mapping")
            rpc_url = entry.get("rpc_url")
            if not rpc_url:
                raise ConfigurationError(f"Domain {domain} has no rpc_url")

            app.register_domain(
                domain,
                DomainContracts(
                    name=str(entry.get("name", domain)),
                    provider=JsonRpcProvider(rpc_url, domain=domain, timeout_ms=timeout_ms),
                    proxies={
                        name: ProxiedAddress.from_dict(addresses or {})
                        for name, addresses in (entry.get("proxies") or {}).items()
                    },
                    governed=dict(entry.get("governed") or {}),
                    validator_manager=entry.get("validator_manager") or None,
                    validators=dict(entry.get("validators") or {}),
                ),
            )
        return app
