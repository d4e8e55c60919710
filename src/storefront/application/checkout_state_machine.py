"""Application service: the checkout flow state machine.

Drives a CheckoutSession through its steps:

    selection ──guest──▶ guest_form
        │
        └──login/signup──▶ auth_form(initial | login | signup)
                               │ valid credentials / new account
                               ▼
                           auth_form(loggedIn)

A session whose user is already authenticated starts in
``auth_form(loggedIn)``. A logout from any state returns to
``selection/initial``. Orders can only be submitted from ``guest_form``
or ``auth_form(loggedIn)``, and only once the required fields validate.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import (
    AuthenticationFailed,
    CheckoutNotReady,
    FieldValidationError,
    StorageError,
    ValidationError,
)
from storefront.domain.model.checkout import (
    AuthSubState,
    CheckoutForm,
    CheckoutSession,
    CheckoutStep,
    SubmissionProgress,
)
from storefront.domain.model.profile import Profile
from storefront.domain.port.auth_provider import AuthProvider, AuthUser
from storefront.domain.repository.profile_store import ProfileStore
from storefront.domain.service.field_validation import (
    validate_checkout_field,
    validate_checkout_form,
    validate_email,
    validate_password,
)

logger = logging.getLogger(__name__)

_FORM_FIELDS = frozenset(CheckoutForm.__dataclass_fields__)


class CheckoutStateMachine:

    def __init__(
        self,
        profile_store: ProfileStore,
        auth: AuthProvider | None = None,
    ) -> None:
        self._profile_store = profile_store
        self._auth = auth

    # --- Entry ----------------------------------------------------------------

    def begin(self) -> CheckoutSession:
        """Start a checkout, skipping selection for an authenticated user."""
        session = CheckoutSession()
        user = self._auth.current_user() if self._auth else None
        if user is not None:
            self._enter_logged_in(session, user)
        return session

    # --- Selection ------------------------------------------------------------

    def choose_guest(self, session: CheckoutSession) -> None:
        self._require_step(session, CheckoutStep.SELECTION)
        session.step = CheckoutStep.GUEST_FORM
        session.auth_sub_state = AuthSubState.INITIAL

    def choose_login(self, session: CheckoutSession) -> None:
        self._enter_auth(session, AuthSubState.LOGIN)

    def choose_signup(self, session: CheckoutSession) -> None:
        self._enter_auth(session, AuthSubState.SIGNUP)

    def identify(self, session: CheckoutSession, email: str) -> AuthSubState:
        """Route to login or signup depending on whether the email is known.

        A malformed email leaves the sub-state at ``initial`` with a field
        error on ``email``.
        """
        self._require_auth(session)
        session.form.email = email.strip()
        message = validate_email(session.form.email)
        if message is not None:
            session.field_errors["email"] = message
            session.auth_sub_state = AuthSubState.INITIAL
            return session.auth_sub_state

        session.field_errors.pop("email", None)
        if self._auth.email_exists(session.form.email):
            session.auth_sub_state = AuthSubState.LOGIN
        else:
            session.auth_sub_state = AuthSubState.SIGNUP
        return session.auth_sub_state

    # --- Authentication -------------------------------------------------------

    def login(self, session: CheckoutSession, email: str, password: str) -> None:
        """``auth_form(login)`` + valid credentials -> ``auth_form(loggedIn)``.

        Raises AuthenticationFailed (and stays in ``login``) on bad
        credentials.
        """
        self._require_auth(session, AuthSubState.LOGIN)
        errors = {}
        if not email.strip():
            errors["email"] = "Email is required"
        if not password:
            errors["password"] = "Password is required"
        if errors:
            session.field_errors.update(errors)
            raise FieldValidationError(errors)

        try:
            user = self._auth.sign_in(email.strip(), password)
        except AuthenticationFailed:
            logger.info("Login failed during checkout for session %s", session.id)
            raise

        self._enter_logged_in(session, user)
        logger.info("User %s logged in during checkout", user.id)

    def signup(
        self,
        session: CheckoutSession,
        email: str,
        password: str,
        confirm_password: str,
    ) -> None:
        """``auth_form(signup)`` + valid account data -> ``auth_form(loggedIn)``.

        Creates the user's profile from whatever the form holds. Any
        failure leaves the session in ``signup``.
        """
        self._require_auth(session, AuthSubState.SIGNUP)
        errors = {}
        email_error = validate_email(email)
        if email_error:
            errors["email"] = email_error
        password_error = validate_password(password)
        if password_error:
            errors["password"] = password_error
        elif password != confirm_password:
            errors["confirm_password"] = "Passwords do not match"
        if errors:
            session.field_errors.update(errors)
            raise FieldValidationError(errors)

        user = self._auth.sign_up(email.strip(), password)
        session.form.email = user.email
        self._create_profile(session, user)
        self._enter_logged_in(session, user)
        logger.info("User %s signed up during checkout", user.id)

    def logout(self, session: CheckoutSession) -> None:
        """External logout / session invalidation: back to the start."""
        session.step = CheckoutStep.SELECTION
        session.auth_sub_state = AuthSubState.INITIAL
        session.user_id = None
        session.form.password = ""
        session.form.confirm_password = ""
        session.field_errors.clear()
        if session.submission.order is None:
            session.submission = SubmissionProgress()

    # --- Form -----------------------------------------------------------------

    def update_fields(self, session: CheckoutSession, **values: str) -> dict[str, str]:
        """Set form fields and re-validate only those fields.

        Returns the session's current field errors.
        """
        unknown = set(values) - _FORM_FIELDS
        if unknown:
            raise ValidationError(f"Unknown checkout field(s): {', '.join(sorted(unknown))}")

        touched = set(values)
        for name, value in values.items():
            setattr(session.form, name, value)
        if "country" in touched:
            # phone shape depends on the country
            touched.add("phone")

        for name in touched:
            message = validate_checkout_field(session.form, name)
            if message is None:
                session.field_errors.pop(name, None)
            else:
                session.field_errors[name] = message
        return dict(session.field_errors)

    def validate_details(self, session: CheckoutSession) -> bool:
        """Re-validate every required field, attaching field-scoped errors."""
        errors = validate_checkout_form(session.form)
        for name in list(session.field_errors):
            if name not in errors and validate_checkout_field(session.form, name) is None:
                session.field_errors.pop(name)
        session.field_errors.update(errors)
        return not errors

    def require_submittable(self, session: CheckoutSession) -> None:
        """Gate into order submission.

        Raises:
            CheckoutNotReady: if the session is not in a submittable step.
            FieldValidationError: if any required field is invalid.
        """
        if not session.allows_submission:
            raise CheckoutNotReady(
                f"Cannot submit from {session.step.value}/{session.auth_sub_state.value}"
            )
        if not self.validate_details(session):
            raise FieldValidationError(session.field_errors)

    # --- Internal helpers -----------------------------------------------------

    def _enter_auth(self, session: CheckoutSession, sub_state: AuthSubState) -> None:
        if self._auth is None:
            raise AuthenticationFailed(
                "Sign-in is not available; continue as guest",
                reason="authentication_unavailable",
            )
        in_auth_flow = (
            session.step is CheckoutStep.AUTH_FORM
            and session.auth_sub_state is not AuthSubState.LOGGED_IN
        )
        if session.step is not CheckoutStep.SELECTION and not in_auth_flow:
            raise CheckoutNotReady(
                f"Cannot switch to {sub_state.value} from {session.step.value}",
                reason="invalid_transition",
            )
        session.step = CheckoutStep.AUTH_FORM
        session.auth_sub_state = sub_state

    def _enter_logged_in(self, session: CheckoutSession, user: AuthUser) -> None:
        session.step = CheckoutStep.AUTH_FORM
        session.auth_sub_state = AuthSubState.LOGGED_IN
        session.user_id = user.id
        session.form.email = user.email
        session.form.password = ""
        session.form.confirm_password = ""
        session.submission.profile_id = None
        for name in ("email", "password", "confirm_password"):
            session.field_errors.pop(name, None)
        self._prefill_from_profile(session, user)

    def _prefill_from_profile(self, session: CheckoutSession, user: AuthUser) -> None:
        """Fill empty form fields from the stored profile, if there is one."""
        try:
            profile = self._profile_store.find_by_user_id(user.id)
        except StorageError:
            logger.warning("Could not load profile %s for pre-fill", user.id, exc_info=True)
            return
        if profile is None:
            return

        form = session.form
        form.name = form.name or profile.full_name
        form.phone = form.phone or profile.phone
        address = profile.default_shipping_address
        if address is not None and not form.address:
            form.address = address.address
            form.city = form.city or address.city
            form.postal_code = form.postal_code or address.postal_code
            form.country = address.country or form.country

    def _create_profile(self, session: CheckoutSession, user: AuthUser) -> None:
        form = session.form
        profile = Profile(
            id=user.id,
            email=user.email,
            full_name=form.name.strip(),
            phone=form.phone.strip(),
            default_shipping_address=form.shipping_address() if form.address.strip() else None,
        )
        try:
            self._profile_store.upsert(profile)
        except StorageError:
            # The account exists; order submission fetches-or-creates the
            # profile again, so signup still completes.
            logger.warning("Profile creation failed after signup for %s", user.id, exc_info=True)

    @staticmethod
    def _require_step(session: CheckoutSession, step: CheckoutStep) -> None:
        if session.step is not step:
            raise CheckoutNotReady(
                f"Expected step {step.value}, session is at {session.step.value}",
                reason="invalid_transition",
            )

    def _require_auth(
        self, session: CheckoutSession, sub_state: AuthSubState | None = None
    ) -> None:
        if self._auth is None:
            raise AuthenticationFailed(
                "Sign-in is not available; continue as guest",
                reason="authentication_unavailable",
            )
        self._require_step(session, CheckoutStep.AUTH_FORM)
        if sub_state is not None and session.auth_sub_state is not sub_state:
            raise CheckoutNotReady(
                f"Expected {sub_state.value}, session is at {session.auth_sub_state.value}",
                reason="invalid_transition",
            )
