from __future__ import annotations

from app.application.dto.auth import (
    AuthPolicy,
    AuthTokensOutput,
    ConfirmEmailInput,
    ConfirmEmailOutput,
    CurrentUserOutput,
    RefreshTokensInput,
    RegisterUserInput,
    RegisterUserOutput,
    SignInInput,
    SignOutInput,
)
from app.application.ports.accounts_port import AccountsPort
from app.application.ports.notification_port import ConfirmationDispatcherPort
from app.application.ports.password_hasher_port import PasswordHasherPort
from app.application.ports.pending_registration_port import PendingRegistrationPort
from app.application.ports.token_port import TokenPort
from app.application.use_cases.confirm_email import ConfirmEmailUseCase
from app.application.use_cases.get_current_user import GetCurrentUserUseCase
from app.application.use_cases.refresh_session import RefreshSessionUseCase
from app.application.use_cases.register_user import RegisterUserUseCase
from app.application.use_cases.sign_in import SignInUseCase
from app.application.use_cases.sign_out import SignOutUseCase


class SessionManager:
    """Account verification and token lifecycle over the account and pending stores.

    Every call re-reads state from the stores; nothing is cached between calls.
    Operations raise ``app.domain.exceptions.DomainError`` subclasses on failure.
    """

    def __init__(
        self,
        *,
        accounts_port: AccountsPort,
        pending_port: PendingRegistrationPort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
        dispatcher: ConfirmationDispatcherPort,
        policy: AuthPolicy,
    ):
        self._register = RegisterUserUseCase(
            accounts_port=accounts_port,
            pending_port=pending_port,
            password_hasher=password_hasher,
            dispatcher=dispatcher,
            policy=policy,
        )
        self._confirm_email = ConfirmEmailUseCase(
            accounts_port=accounts_port,
            pending_port=pending_port,
        )
        self._sign_in = SignInUseCase(
            accounts_port=accounts_port,
            password_hasher=password_hasher,
            token_port=token_port,
            policy=policy,
        )
        self._refresh = RefreshSessionUseCase(
            accounts_port=accounts_port,
            token_port=token_port,
            policy=policy,
        )
        self._sign_out = SignOutUseCase(accounts_port=accounts_port, token_port=token_port)
        self._current_user = GetCurrentUserUseCase(accounts_port=accounts_port, token_port=token_port)

    def register(self, command: RegisterUserInput) -> RegisterUserOutput:
        return self._register.execute(command)

    def confirm_email(self, command: ConfirmEmailInput) -> ConfirmEmailOutput:
        return self._confirm_email.execute(command)

    def sign_in(self, command: SignInInput) -> AuthTokensOutput:
        return self._sign_in.execute(command)

    def refresh_tokens(self, command: RefreshTokensInput) -> AuthTokensOutput:
        return self._refresh.execute(command)

    def sign_out(self, command: SignOutInput) -> None:
        self._sign_out.execute(command)

    def current_user(self, *, access_token: str) -> CurrentUserOutput:
        return self._current_user.execute(access_token=access_token)
