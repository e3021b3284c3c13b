import logging
import os
import sys

from seatkeeper.rules.models import Rules

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.
    """
    missing = [env_var for env_var in rules.ops.required_env if env_var not in os.environ]
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    if not rules.issuance.serialize_per_club:
        logger.warning(
            "issuance.serialize_per_club is off: concurrent batches can exceed seat caps"
        )

    logger.info("Configuration validated (rules %s)", rules.project.rules_version)
