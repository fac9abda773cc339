import logging
from enum import Enum
from typing import Iterable, List, Optional

from email_validator import EmailNotValidError, validate_email

from photobooth.models.booth import BoothConfig

logger = logging.getLogger(__name__)

WILDCARD = "*"

CONSENT = "By entering your email address(es), you consent to having your photos processed by the system and saved on our servers."


class EmailAddressValidity(str, Enum):
    invalid = "invalid"
    domain_blocked = "domain_blocked"
    valid = "valid"


class SubmitOutcome(str, Enum):
    added = "added"
    rejected = "rejected"
    finish = "finish"
    cancel = "cancel"


def _matches(entries: Iterable[str], domain: str) -> bool:
    return any(entry == WILDCARD or entry.lower() == domain for entry in entries)


def is_domain_allowed(domain: str, whitelist: Iterable[str], blacklist: Iterable[str]) -> bool:
    # a whitelist hit wins over a blacklist entry for the same domain
    domain = domain.lower()
    if _matches(whitelist, domain):
        return True
    if _matches(blacklist, domain):
        return False
    return True


def classify_address(address: str, whitelist: Iterable[str], blacklist: Iterable[str]) -> EmailAddressValidity:
    try:
        parsed = validate_email(address, check_deliverability=False)
    except EmailNotValidError:
        return EmailAddressValidity.invalid

    if not is_domain_allowed(parsed.domain, whitelist, blacklist):
        return EmailAddressValidity.domain_blocked
    return EmailAddressValidity.valid


class RecipientForm:
    """Recipient list and the address being typed on the email screen."""

    def __init__(self, config: BoothConfig):
        self.config = config
        self.addresses: List[str] = []
        self.current = ""
        self.validity: Optional[EmailAddressValidity] = None

    @property
    def max_recipients(self) -> int:
        return self.config.email_max_recipients

    @property
    def is_full(self) -> bool:
        return len(self.addresses) >= self.max_recipients

    def input(self, text: str) -> bool:
        if self.is_full:
            logger.debug("Recipient list is full, ignoring input")
            return False
        self.current = text.strip()
        self.validity = classify_address(
            self.current,
            self.config.email_whitelisted_domains,
            self.config.email_blacklisted_domains
        ) if self.current else None
        return True

    def submit(self) -> SubmitOutcome:
        if self.current and not self.is_full:
            if self.validity != EmailAddressValidity.valid:
                return SubmitOutcome.rejected
            self.addresses.append(self.current)
            self.current = ""
            self.validity = None
            return SubmitOutcome.added
        if self.addresses:
            return SubmitOutcome.finish
        return SubmitOutcome.cancel

    @property
    def placeholder(self) -> str:
        if self.is_full:
            return "Maximum number of recipients reached"
        return f"my_email@{self.config.email_example_domain}"

    @property
    def action_label(self) -> str:
        if self.current and not self.is_full:
            return "Press [Enter] to add email address"
        if self.addresses:
            return "Press [Enter] to finish"
        return "Press [Enter] to cancel and delete your photos"

    @property
    def guidance(self) -> str:
        if self.is_full:
            return ("You have reached the maximum number of recipients. "
                    "Press [Enter] to have the photo emailed to the above accounts.")
        if self.current and self.validity == EmailAddressValidity.invalid:
            return f"{CONSENT} Please enter a valid email address."
        if self.current and self.validity == EmailAddressValidity.domain_blocked:
            return f"{CONSENT} {self.config.email_validation_failed_help}"
        if self.current:
            return CONSENT
        if self.addresses:
            return ("You may add more addresses to send the photo to. Press [Enter] to have the photo "
                    "emailed to the above accounts, or type another one.")
        return ("Enter your email address so we can send you the photos you just took. "
                f"{CONSENT} Press [Enter] now to cancel.")
