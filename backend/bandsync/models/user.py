"""User model: the credential store record behind login and registration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from bandsync.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .refresh_token import RefreshToken


def has_dotted_domain(email: str) -> bool:
    """Return ``True`` when ``email`` has an ``@`` and a dot in its domain part."""
    local, sep, domain = email.rpartition("@")
    return bool(local and sep and "." in domain.strip("."))


class User(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Band member account.

    Fields
    ------
    email : str
        Login email. Matched exactly as stored (no case folding).
    password_hash : str
        Salted one-way digest (write-only setter via ``password``).
    first_name, last_name : str
        Display name.
    phone : str | None
        Optional contact number.
    profile_image : str | None
        Optional avatar URL.
    default_instrument : str | None
        Instrument shown by default on rehearsal rosters.
    is_admin : bool
        Admin/member flag; the only authorization bit carried here.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    profile_image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    default_instrument: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        :param raw: Plain text password to hash.
        :raises ValueError: If ``raw`` is empty or not a string.
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :returns: ``True`` if it matches; otherwise ``False``.
        """
        if not self.password_hash:
            return False
        return bool(check_password_hash(self.password_hash, raw))

    # -------------------- Validators --------------------
    @validates("email")
    def _validate_email(self, key: str, value: str) -> str:
        """
        Reject blank or obviously malformed emails. The value is stored as given.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        if not has_dotted_domain(value):
            raise ValueError("Email format looks invalid.")
        return value

    @validates("first_name", "last_name")
    def _validate_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key} is required.")
        return value.strip()
