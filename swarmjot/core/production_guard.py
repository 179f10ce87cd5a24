"""Production guard — refuses to build an engine from an unsafe configuration.

Checked once, when a ``ContentEngine`` is constructed, before any request
reaches a node.  Outside production nothing is checked.  In production every
broken rule is collected and reported in a single ``ProductionConfigError``
so an operator can fix them all in one pass.

Whether the all-zero placeholder batch may stand in for real capacity is
decided here too (``placeholder_batch_allowed``); the capacity resolver asks
rather than inspecting the environment itself.
"""

from __future__ import annotations

import logging

from swarmjot.config import SwarmjotConfig

logger = logging.getLogger(__name__)


class ProductionConfigError(RuntimeError):
    """The configuration is not fit for production.

    Raised from ``ContentEngine.__init__``; the CLI reports it and exits 1.
    """


def enforce_production_constraints(config: SwarmjotConfig) -> None:
    """Reject a production configuration that would write unsafely.

    Rules
    -----
    1. ``debug`` is off.
    2. ``postage_batch_id`` is not ``"auto"`` (the development placeholder).
    3. ``bee_api`` names a node.

    Parameters
    ----------
    config:
        The configuration an engine is about to be built from.

    Raises
    ------
    ProductionConfigError
        Listing every rule the configuration breaks.
    """
    if not config.is_production:
        return

    problems: list[str] = []
    if config.debug:
        problems.append("debug is enabled; set SWARMJOT_DEBUG=false.")
    if config.postage_batch_id.strip().lower() == "auto":
        problems.append(
            "postage_batch_id is 'auto', which writes with the development "
            "placeholder; set SWARMJOT_POSTAGE_BATCH_ID to a real batch or leave it empty."
        )
    if not config.bee_api.strip():
        problems.append("bee_api is empty; set SWARMJOT_BEE_API.")

    if problems:
        report = "Refusing to start in production:\n" + "\n".join(
            f"  - {p}" for p in problems
        )
        logger.critical(report)
        raise ProductionConfigError(report)

    logger.info("Production guard passed for node %s.", config.bee_api)


def placeholder_batch_allowed(config: SwarmjotConfig) -> bool:
    """Whether writes may fall back to the all-zero placeholder batch."""
    return not config.is_production
