"""EmailAddress value object for validated, normalized email addresses."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from identity.domain import identity

_FORBIDDEN_CHARACTERS = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


@identity.value_object
class EmailAddress:
    """A structurally valid email address, stored lowercased.

    Enforces exactly one @, non-empty local and domain parts without leading
    or trailing dots, a dotted domain, no consecutive dots, no whitespace and
    no forbidden characters.
    """

    address: String(required=True, max_length=254)

    @classmethod
    def normalized(cls, value: str) -> "EmailAddress":
        return cls(address=(value or "").strip().lower())

    @invariant.post
    def verify_email_address(self):
        email = self.address
        error = ValidationError({"email": [f"Invalid email address: {email!r}"]})

        if any(ch.isspace() for ch in email) or email.count("@") != 1:
            raise error

        local_part, domain_part = email.split("@", 1)

        if not local_part or local_part.startswith(".") or local_part.endswith("."):
            raise error

        if not domain_part or domain_part.startswith(".") or domain_part.endswith(".") or "." not in domain_part:
            raise error

        if any(label.startswith("-") or label.endswith("-") for label in domain_part.split(".")):
            raise error

        if ".." in email or any(ch in email for ch in _FORBIDDEN_CHARACTERS):
            raise error
