"""Sequenced deployment of interdependent contracts."""

import dataclasses
import logging
from pathlib import Path
from typing import Optional, Sequence, Set, Union

from .catalog import MessageCatalog, default_catalog
from .chain import ChainClient
from .exceptions import DeploymentAborted, DeploymentError, DuplicateContractError
from .executor import deploy_contract
from .references import resolve_references
from .registry import DeploymentRegistry
from .types import ContractDescriptor

logger = logging.getLogger(__name__)


def run_deployment(
    client: ChainClient,
    descriptors: Sequence[ContractDescriptor],
    registry: Optional[DeploymentRegistry] = None,
    catalog: Optional[MessageCatalog] = None,
    registry_path: Optional[Union[Path, str]] = None,
) -> DeploymentRegistry:
    """
    Deploy contracts one after another in the given order.

    References in each init message are resolved against the contracts
    deployed before it, so the caller must order descriptors such that every
    Ref points at an earlier entry. Placeholders resolve to the deployer address.

    Contracts already present in ``registry`` are skipped, which lets an
    operator resume a run that halted part way through.

    Args:
        client: Chain client signing as the deployer
        descriptors: Contracts to deploy, in dependency order
        registry: Registry to extend (defaults to a new, empty one)
        catalog: Message catalog to validate against (defaults to the standard one)
        registry_path: If given, the registry is saved here after every deployment

    Returns:
        The registry, with one record per descriptor

    Raises:
        DuplicateContractError: If two descriptors share a name (nothing is sent)
        DeploymentError: On the first failure. The run halts and the exception's
            ``contract_name`` and ``registry`` attributes identify the failing
            contract and the records made so far. Errors that are not
            DeploymentErrors are wrapped in DeploymentAborted.
    """
    if registry is None:
        registry = DeploymentRegistry()
    if catalog is None:
        catalog = default_catalog()

    seen: Set[str] = set()
    for descriptor in descriptors:
        if descriptor.name in seen:
            raise DuplicateContractError(descriptor.name)
        seen.add(descriptor.name)

    for descriptor in descriptors:
        if descriptor.name in registry:
            record = registry[descriptor.name]
            logger.info("Skipping %s, already deployed at %s", descriptor.name, record.address)
            continue

        try:
            init_message = resolve_references(
                descriptor.init_message,
                registry,
                placeholder_address=client.address,
                contract_name=descriptor.name,
            )
            resolved = dataclasses.replace(descriptor, init_message=init_message)
            record = deploy_contract(client, resolved, catalog)
        except DeploymentError as e:
            logger.error("Deployment halted at %s: %s", descriptor.name, e)
            e.contract_name = descriptor.name
            e.registry = registry
            raise
        except Exception as e:
            logger.error("Deployment halted at %s: %s", descriptor.name, e)
            raise DeploymentAborted(descriptor.name, registry, e) from e

        registry.record(record)
        if registry_path is not None:
            registry.save(registry_path)

    logger.info("Deployment complete: %d contract(s) recorded", len(registry))
    return registry
