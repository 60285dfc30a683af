"""Per-command wiring of configuration, logging and the store."""

import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from fluxledger.aggregators.billing_aggregator import InvoiceRules
from fluxledger.aggregators.fiscal_projector import FiscalProjector
from fluxledger.calculators.fiscal_calculator import FiscalRules
from fluxledger.cli.error_handlers import ConfigurationError
from fluxledger.config.logging_config import LoggingConfig, configure_logging
from fluxledger.config.settings import FluxLedgerConfig, get_config
from fluxledger.exceptions import CapabilityError, RecordNotFoundError
from fluxledger.models.base import first_error
from fluxledger.models.entry import TimeEntry
from fluxledger.models.profile import UserProfile
from fluxledger.services.billing_service import BillingService
from fluxledger.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Collaborators shared by the commands of one invocation.

    ``profile`` is None for a single-tenant ledger that stores no profile;
    such a ledger is not subject to plan limits.
    """

    config: FluxLedgerConfig
    store: LedgerStore
    user_id: str
    profile: Optional[UserProfile] = None

    def billing_service(self) -> BillingService:
        return BillingService(self.store, InvoiceRules.from_config(self.config))

    def fiscal_projector(self) -> FiscalProjector:
        return FiscalProjector(self.store, FiscalRules.from_config(self.config))

    def require_reports(self) -> None:
        """Raise CapabilityError unless the user's plan includes reports."""
        if self.profile is None or self.profile.can_access_reports():
            return
        raise CapabilityError(
            f"Plan '{self.profile.subscription_status.value}' does not include "
            "billing documents and fiscal projections",
            user_id=self.user_id,
        )

    def add_entry(self, entry: TimeEntry) -> TimeEntry:
        """Save a new entry through the plan's entry limit."""
        return self.billing_service().add_entry(
            self.user_id,
            entry,
            profile=self.profile,
            trial_entry_limit=self.config.trial_entry_limit,
        )


def load_profile(store: LedgerStore, user_id: str) -> Optional[UserProfile]:
    """The stored profile of ``user_id``, or None when the ledger keeps none."""
    try:
        return store.get_profile(user_id)
    except RecordNotFoundError:
        logger.debug(f"No profile for {user_id}, running single-tenant")
        return None


def open_session() -> Session:
    """Load configuration, set up logging, open the store and load the profile.

    Raises:
        ConfigurationError: If the environment holds invalid settings
        StorageError: If the data file or the stored profile is unreadable
    """
    try:
        config = get_config()
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {first_error(e)}",
            recovery_hint="Check your .env file and environment variables",
        ) from e

    configure_logging(LoggingConfig.from_settings(config))
    store = LedgerStore(config.data_file)
    return Session(
        config=config,
        store=store,
        user_id=config.default_user_id,
        profile=load_profile(store, config.default_user_id),
    )
