"""Identity resolvers: registration, login, profile and status."""

from ..config import InkwellSettings
from ..errors import ConflictError, NotFoundError, UnauthorizedError
from ..logger import get_logger
from ..security import create_access_token, hash_password, verify_password
from ..stores import UserStore
from ..types import AuthContext, AuthData, User, UserInput
from .validation import check_user_input, raise_if_invalid


def require_auth(auth: AuthContext) -> str:
    """Return the authenticated user id or raise UnauthorizedError."""
    if not auth.is_auth or not auth.user_id:
        raise UnauthorizedError("Not authenticated!")
    return auth.user_id


class UserResolvers:
    """Stateless mediator between the API surface and the identity store."""

    def __init__(self, users: UserStore, settings: InkwellSettings):
        self.users = users
        self.settings = settings
        self.logger = get_logger("resolvers.users")

    async def create_user(self, user_input: UserInput) -> User:
        """Register a user. The returned record still carries the password hash."""
        raise_if_invalid(check_user_input(user_input.email, user_input.password))

        if await self.users.get_by_email(user_input.email):
            raise ConflictError("User already exists")

        password_hash = hash_password(user_input.password, rounds=self.settings.BCRYPT_ROUNDS)
        user = await self.users.create(email=user_input.email, password_hash=password_hash, name=user_input.name)
        self.logger.info("user created", user_id=user.id)
        return user

    async def login(self, email: str, password: str) -> AuthData:
        user = await self.users.get_by_email(email)
        if not user:
            raise NotFoundError("User not found", status=401)

        if not verify_password(password, user.password):
            raise UnauthorizedError("Invalid email or password")

        token = create_access_token(user.id, user.email, self.settings)
        self.logger.info("user logged in", user_id=user.id)
        return AuthData(token=token, user_id=user.id)

    async def user(self, auth: AuthContext) -> User:
        user_id = require_auth(auth)
        user = await self.users.get(user_id)
        if not user:
            raise NotFoundError("No user found!")
        return user

    async def update_status(self, status: str, auth: AuthContext) -> User:
        user_id = require_auth(auth)
        user = await self.users.get(user_id)
        if not user:
            raise NotFoundError("No user found!")
        user.status = status
        return await self.users.save(user)
