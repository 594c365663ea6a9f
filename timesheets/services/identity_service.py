from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash
from typing import Optional
from timesheets.database import Database
from timesheets.exceptions import AuthenticationError, InvalidInputError, StoreNotConfiguredError, WriteError
from timesheets.models.schemas import Identity
from timesheets.models.timesheet import UserRecord, AuthSessionRecord
import secrets
import logging

logger = logging.getLogger(__name__)


class IdentityService:
    """Email/password accounts with opaque bearer session tokens."""

    def __init__(self, database: Optional[Database]):
        self.database = database

    def _require_database(self, operation: str) -> Database:
        if self.database is None:
            raise StoreNotConfiguredError(operation)
        return self.database

    @staticmethod
    def _identity(user: UserRecord) -> Identity:
        return Identity(id=user.id, email=user.email, display_name=user.display_name)

    def register(self, email: str, password: str, display_name: Optional[str] = None) -> Identity:
        database = self._require_database("register")
        email = (email or "").strip().lower()
        if not email or "@" not in email:
            raise InvalidInputError("email", "a valid email address is required")
        if not password:
            raise InvalidInputError("password", "password is required")

        with database.session() as db:
            user = UserRecord(
                email=email,
                display_name=(display_name or "").strip() or email,
                password_hash=generate_password_hash(password)
            )
            try:
                db.add(user)
                db.commit()
                db.refresh(user)
            except IntegrityError:
                db.rollback()
                logger.info(f"Registration refused, {email} already exists")
                raise InvalidInputError("email", "an account with this email already exists")
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Error registering {email}: {str(e)}")
                raise WriteError("users", e.__class__.__name__) from e

            logger.info(f"Registered user {user.id} ({email})")
            return self._identity(user)

    def sign_in(self, email: str, password: str) -> str:
        """Check credentials and open a session. Returns the session token."""
        database = self._require_database("sign in")
        email = (email or "").strip().lower()

        with database.session() as db:
            user = db.query(UserRecord).filter(UserRecord.email == email).first()
            if user is None or not check_password_hash(user.password_hash, password or ""):
                logger.info(f"Failed sign-in for {email}")
                raise AuthenticationError("Invalid email or password")

            token = secrets.token_urlsafe(32)
            try:
                db.add(AuthSessionRecord(token=token, user_id=user.id))
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Error opening session for {email}: {str(e)}")
                raise WriteError("auth_sessions", e.__class__.__name__) from e

            logger.info(f"User {user.id} signed in")
            return token

    def sign_out(self, token: str) -> bool:
        database = self._require_database("sign out")
        with database.session() as db:
            session = db.query(AuthSessionRecord).filter(AuthSessionRecord.token == token).first()
            if session is None:
                return False
            user_id = session.user_id
            db.delete(session)
            db.commit()
            logger.info(f"User {user_id} signed out")
            return True

    def current_user(self, token: Optional[str]) -> Identity:
        """Resolve a session token to the signed-in identity."""
        if not token:
            raise AuthenticationError("Not signed in")
        database = self._require_database("read the current user")

        with database.session() as db:
            user = (
                db.query(UserRecord)
                .join(AuthSessionRecord, AuthSessionRecord.user_id == UserRecord.id)
                .filter(AuthSessionRecord.token == token)
                .first()
            )
            if user is None:
                raise AuthenticationError("Session is invalid or has ended")
            return self._identity(user)
