import json
from decimal import Decimal
from types import SimpleNamespace
from unittest import TestCase
from unittest.mock import Mock, patch

import stripe
from django.db import DatabaseError
from django.test import TestCase as DjangoTestCase, override_settings
from django.urls import reverse

from accounts.models import CustomUser, MentorProfile
from billing.exceptions import (
    AccountNotFound,
    CheckoutError,
    ConnectError,
    InvalidAmount,
    InvalidCommissionRate,
    StripeNotConfigured,
)
from billing.models import SystemConfig
from billing.services import checkout_service, connect_service
from billing.services.commission_service import compute_fee, split_amount, validate_rate
from billing.services.config_service import ConfigurationService, get_commission_rate, set_commission_rate
from billing.services.payout_eligibility import (
    ConnectedAccountStatus,
    OnboardingStatus,
    account_checkout_eligibility,
    can_accept_checkout,
    classify,
)
from billing.views import _handle_checkout_session_completed
from projects.models import Enrollment, Project


class CommissionPolicyTests(TestCase):
    def test_half_up_rounding_on_the_half_cent(self):
        self.assertEqual(compute_fee(29900, 0.085), 2542)
        split = split_amount(29900, 0.085)
        self.assertEqual(split.net, 27358)
        self.assertEqual(split.rate, Decimal("0.085"))

    def test_fee_stays_within_gross(self):
        for gross in (0, 1, 7, 99, 1000, 29900, 123457, 10 ** 9):
            for rate in (0, 0.001, 0.085, 0.1, 0.5, 0.999, "0.9999"):
                fee = compute_fee(gross, rate)
                self.assertGreaterEqual(fee, 0)
                self.assertLessEqual(fee, gross)
                split = split_amount(gross, rate)
                self.assertEqual(split.fee + split.net, gross)

    def test_same_input_same_fee(self):
        self.assertEqual(compute_fee(4999, 0.085), compute_fee(4999, 0.085))

    def test_zero_rate_and_zero_gross(self):
        self.assertEqual(compute_fee(10000, 0), 0)
        self.assertEqual(compute_fee(0, 0.085), 0)

    def test_rate_out_of_range_is_rejected_not_clamped(self):
        for rate in (-0.01, 1, 1.0, 1.5, float("nan"), float("inf"), True, None, "abc"):
            with self.assertRaises(InvalidCommissionRate):
                compute_fee(1000, rate)

    def test_invalid_amounts(self):
        for gross in (-1, 10.5, "100", None, True):
            with self.assertRaises(InvalidAmount):
                compute_fee(gross, 0.085)

    def test_validate_rate_accepts_numeric_strings(self):
        self.assertEqual(validate_rate(" 0.25 "), Decimal("0.25"))


class ConfigurationStoreTests(DjangoTestCase):
    def test_missing_row_returns_default_without_writing_it(self):
        self.assertEqual(get_commission_rate(), 0.085)
        self.assertFalse(SystemConfig.objects.exists())

    def test_set_then_get_returns_new_rate(self):
        self.assertEqual(set_commission_rate(0.10), 0.1)
        self.assertEqual(get_commission_rate(), 0.1)
        self.assertEqual(compute_fee(10000, get_commission_rate()), 1000)
        self.assertEqual(SystemConfig.objects.get(key="COMMISSION_RATE").value, "0.1")

    def test_invalid_rates_leave_stored_value_unchanged(self):
        set_commission_rate(0.2)
        for rate in (-0.01, 1.0):
            with self.assertRaises(InvalidCommissionRate):
                set_commission_rate(rate)
        self.assertEqual(get_commission_rate(), 0.2)
        self.assertEqual(SystemConfig.objects.count(), 1)

    def test_invalid_rate_on_empty_store_writes_nothing(self):
        with self.assertRaises(InvalidCommissionRate):
            set_commission_rate(1.0)
        self.assertFalse(SystemConfig.objects.exists())

    def test_garbage_stored_value_reads_as_default(self):
        SystemConfig.objects.create(key="COMMISSION_RATE", value="lots")
        self.assertEqual(get_commission_rate(), 0.085)

    @override_settings(DEFAULT_COMMISSION_RATE=0.05)
    def test_default_follows_settings(self):
        self.assertEqual(ConfigurationService().get_commission_rate(), 0.05)

    @override_settings(DEFAULT_COMMISSION_RATE=1.5)
    def test_out_of_range_default_falls_back_to_built_in_rate(self):
        with self.assertLogs("billing.services.config_service", level="WARNING"):
            rate = get_commission_rate()
        self.assertEqual(rate, 0.085)
        self.assertFalse(SystemConfig.objects.exists())

    @override_settings(DEFAULT_COMMISSION_RATE="abc")
    def test_unparseable_default_falls_back_to_built_in_rate(self):
        with self.assertLogs("billing.services.config_service", level="WARNING"):
            self.assertEqual(ConfigurationService().default_rate, 0.085)


class ConfigurationStoreFailOpenTests(TestCase):
    @patch("billing.services.config_service.SystemConfig")
    def test_database_error_returns_default(self, system_config):
        system_config.objects.filter.side_effect = DatabaseError("connection refused")

        with self.assertLogs("billing.services.config_service", level="WARNING"):
            rate = ConfigurationService(default_rate=0.085).get_commission_rate()

        self.assertEqual(rate, 0.085)


class PayoutEligibilityTests(TestCase):
    def test_details_submitted_is_checked_first(self):
        account = {"details_submitted": False, "charges_enabled": True, "payouts_enabled": True}
        self.assertEqual(classify(account), OnboardingStatus.INCOMPLETE)

    def test_classification_ladder(self):
        cases = [
            ((False, False, False), OnboardingStatus.INCOMPLETE),
            ((True, False, False), OnboardingStatus.DETAILS_SUBMITTED),
            ((True, False, True), OnboardingStatus.DETAILS_SUBMITTED),
            ((True, True, False), OnboardingStatus.CHARGES_ENABLED),
            ((True, True, True), OnboardingStatus.FULLY_ONBOARDED),
        ]
        for (details, charges, payouts), expected in cases:
            status = ConnectedAccountStatus(
                account_id="acct_1",
                details_submitted=details,
                charges_enabled=charges,
                payouts_enabled=payouts,
            )
            self.assertEqual(classify(status), expected)

    def test_charges_enabled_without_payouts_can_accept_checkout(self):
        account = SimpleNamespace(details_submitted=True, charges_enabled=True, payouts_enabled=False)
        self.assertEqual(classify(account), OnboardingStatus.CHARGES_ENABLED)
        self.assertTrue(can_accept_checkout(account))

    def test_checkout_gate_ignores_other_flags(self):
        account = {"details_submitted": True, "charges_enabled": False, "payouts_enabled": True}
        self.assertFalse(can_accept_checkout(account))
        self.assertFalse(can_accept_checkout(None))

    def test_fetch_failure_is_not_eligible(self):
        fetch = Mock(side_effect=ConnectError("Failed to retrieve account status", detail="timeout"))
        self.assertFalse(account_checkout_eligibility("acct_1", fetch=fetch))

    def test_missing_account_is_not_eligible(self):
        fetch = Mock(side_effect=AccountNotFound("Account not found"))
        self.assertFalse(account_checkout_eligibility("acct_1", fetch=fetch))
        self.assertFalse(account_checkout_eligibility("", fetch=fetch))

    def test_fetched_status_drives_eligibility(self):
        fetch = Mock(return_value=ConnectedAccountStatus(account_id="acct_1", charges_enabled=True))
        self.assertTrue(account_checkout_eligibility("acct_1", fetch=fetch))
        fetch.assert_called_once_with("acct_1")


class ConnectServiceTests(TestCase):
    def test_account_id_format(self):
        with self.assertRaises(ConnectError):
            connect_service.validate_account_id("cus_123")
        self.assertEqual(connect_service.validate_account_id("acct_123"), "acct_123")

    @override_settings(STRIPE_SECRET_KEY="")
    def test_unconfigured_stripe(self):
        with self.assertRaises(StripeNotConfigured):
            connect_service.retrieve_account_status("acct_123")

    @patch("billing.services.connect_service.get_client")
    def test_status_maps_account_flags(self, get_client):
        account = {
            "id": "acct_123",
            "charges_enabled": True,
            "payouts_enabled": False,
            "details_submitted": True,
            "requirements": {"currently_due": ["external_account"], "past_due": []},
            "country": "US",
            "default_currency": "usd",
        }
        get_client.return_value.Account.retrieve.return_value = SimpleNamespace(id="acct_123", get=account.get)

        status = connect_service.retrieve_account_status("acct_123")
        body = connect_service.serialize_account_status(status)

        self.assertTrue(status.charges_enabled)
        self.assertEqual(status.requirements_currently_due, ["external_account"])
        self.assertEqual(body["onboardingStatus"], "charges_enabled")
        self.assertTrue(body["canReceivePayments"])
        self.assertFalse(body["canReceivePayouts"])

    @patch("billing.services.connect_service.get_client")
    def test_unknown_account(self, get_client):
        get_client.return_value.Account.retrieve.side_effect = stripe.InvalidRequestError(
            "No such account: 'acct_404'", "account", code="resource_missing"
        )
        with self.assertRaises(AccountNotFound) as ctx:
            connect_service.retrieve_account_status("acct_404")
        self.assertIn("No such account", ctx.exception.detail)

    @patch("billing.services.connect_service.get_client")
    def test_other_stripe_errors_become_connect_errors(self, get_client):
        get_client.return_value.Account.retrieve.side_effect = stripe.APIConnectionError("network down")
        with self.assertRaises(ConnectError) as ctx:
            connect_service.retrieve_account_status("acct_123")
        self.assertNotIsInstance(ctx.exception, AccountNotFound)

    @patch("billing.services.connect_service.get_client")
    def test_existing_account_is_reused(self, get_client):
        mentor = SimpleNamespace(id=3, stripe_account_id="acct_existing", save=Mock())
        self.assertEqual(connect_service.create_connected_account(mentor), "acct_existing")
        get_client.assert_not_called()
        mentor.save.assert_not_called()

    @patch("billing.services.connect_service.get_client")
    def test_new_account_is_stored_on_mentor(self, get_client):
        get_client.return_value.Account.create.return_value = SimpleNamespace(id="acct_new")
        mentor = SimpleNamespace(id=3, stripe_account_id="", save=Mock())

        self.assertEqual(connect_service.create_connected_account(mentor), "acct_new")

        kwargs = get_client.return_value.Account.create.call_args.kwargs
        self.assertEqual(kwargs["controller"]["fees"], {"payer": "application"})
        self.assertEqual(kwargs["controller"]["stripe_dashboard"], {"type": "express"})
        self.assertEqual(mentor.stripe_account_id, "acct_new")
        mentor.save.assert_called_once_with(update_fields=["stripe_account_id"])


def _checkout_project(**overrides):
    values = dict(
        id=7,
        title="Build a compiler",
        short_description="",
        is_active=True,
        current_students=0,
        max_students=5,
        price_cents=29900,
        currency="usd",
        mentor=SimpleNamespace(stripe_account_id="acct_mentor"),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class CheckoutFeeTests(TestCase):
    def test_fee_params_shape(self):
        params = checkout_service.build_checkout_fee_params(29900, 0.085, "acct_mentor")
        self.assertEqual(params, {
            "application_fee_amount": 2542,
            "transfer_data": {"destination": "acct_mentor"},
        })
        self.assertEqual(params, checkout_service.build_checkout_fee_params(29900, 0.085, "acct_mentor"))

    @patch("billing.services.checkout_service.get_client")
    @patch("billing.services.checkout_service.build_checkout_fee_params")
    def test_ineligible_mentor_gets_no_fee_params(self, build_params, get_client):
        student = SimpleNamespace(id=11, email="s@example.com")
        with self.assertRaises(CheckoutError):
            checkout_service.create_project_checkout(
                _checkout_project(), student, eligibility_check=lambda account_id: False
            )
        build_params.assert_not_called()
        get_client.assert_not_called()

    @patch("billing.services.checkout_service.get_client")
    def test_mentor_without_account_is_refused(self, get_client):
        project = _checkout_project(mentor=SimpleNamespace(stripe_account_id=""))
        with self.assertRaises(CheckoutError):
            checkout_service.create_project_checkout(
                project, SimpleNamespace(id=1, email="s@example.com"), eligibility_check=lambda a: True
            )
        get_client.assert_not_called()

    @patch("billing.services.checkout_service.get_client")
    def test_hidden_or_full_project_is_refused(self, get_client):
        student = SimpleNamespace(id=11, email="s@example.com")
        for project in (_checkout_project(is_active=False), _checkout_project(current_students=5)):
            with self.assertRaises(CheckoutError):
                checkout_service.create_project_checkout(project, student, eligibility_check=lambda a: True)
        with self.assertRaises(CheckoutError):
            checkout_service.create_project_checkout(
                _checkout_project(), student, quantity=0, eligibility_check=lambda a: True
            )
        get_client.assert_not_called()

    @patch("billing.services.checkout_service.get_commission_rate", return_value=0.085)
    @patch("billing.services.checkout_service.get_client")
    def test_session_carries_fee_and_destination(self, get_client, _rate):
        get_client.return_value.checkout.Session.create.return_value = SimpleNamespace(
            id="cs_test_1", url="https://checkout.stripe.com/c/pay/cs_test_1"
        )
        student = SimpleNamespace(id=11, email="s@example.com")

        result = checkout_service.create_project_checkout(
            _checkout_project(), student, eligibility_check=lambda a: True
        )

        kwargs = get_client.return_value.checkout.Session.create.call_args.kwargs
        self.assertEqual(kwargs["mode"], "payment")
        self.assertEqual(kwargs["payment_intent_data"]["application_fee_amount"], 2542)
        self.assertEqual(kwargs["payment_intent_data"]["transfer_data"], {"destination": "acct_mentor"})
        self.assertEqual(kwargs["metadata"]["project_id"], "7")
        self.assertEqual(kwargs["metadata"]["student_id"], "11")
        self.assertEqual(result["session_id"], "cs_test_1")
        self.assertEqual(result["amount"], 29900)
        self.assertEqual(result["application_fee"], 2542)

    @patch("billing.services.checkout_service.get_commission_rate", return_value=0.085)
    @patch("billing.services.checkout_service.get_client")
    def test_stripe_failure_is_reported_not_retried(self, get_client, _rate):
        get_client.return_value.checkout.Session.create.side_effect = stripe.APIConnectionError("network down")
        with self.assertRaises(CheckoutError) as ctx:
            checkout_service.create_project_checkout(
                _checkout_project(), SimpleNamespace(id=11, email="s@example.com"), eligibility_check=lambda a: True
            )
        self.assertEqual(get_client.return_value.checkout.Session.create.call_count, 1)
        self.assertIn("network down", ctx.exception.detail)


def _make_mentor(email="mentor@example.com", account_id="acct_mentor"):
    user = CustomUser.objects.create_user(email=email, password="pw", role="mentor")
    return MentorProfile.objects.create(user=user, first_name="Ada", stripe_account_id=account_id)


def _make_project(mentor, **overrides):
    values = dict(
        title="Build a compiler",
        description="From tokens to bytecode.",
        category="technology",
        purposes=["career"],
        difficulty="advanced",
        duration=6,
        price=Decimal("299.00"),
        max_students=2,
    )
    values.update(overrides)
    return Project.objects.create(mentor=mentor, **values)


@override_settings(STRIPE_WEBHOOK_SECRET="whsec_test")
class StripeWebhookTests(DjangoTestCase):
    def setUp(self):
        self.mentor = _make_mentor()
        self.project = _make_project(self.mentor)
        self.student = CustomUser.objects.create_user(email="student@example.com", password="pw")
        self.url = reverse("billing:stripe_webhook")

    def _event(self, session_id="cs_test_1", payment_status="paid"):
        return {
            "type": "checkout.session.completed",
            "data": {"object": {
                "id": session_id,
                "payment_status": payment_status,
                "amount_total": 29900,
                "currency": "usd",
                "metadata": {
                    "project_id": str(self.project.id),
                    "student_id": str(self.student.id),
                    "application_fee_amount": "2542",
                },
            }},
        }

    def _post(self):
        return self.client.post(
            self.url, data=b"{}", content_type="application/json", HTTP_STRIPE_SIGNATURE="t=1,v1=abc"
        )

    def test_missing_signature_is_rejected(self):
        response = self.client.post(self.url, data=b"{}", content_type="application/json")
        self.assertEqual(response.status_code, 400)

    @patch("billing.views.stripe.Webhook.construct_event")
    def test_bad_signature_is_rejected(self, construct_event):
        construct_event.side_effect = stripe.SignatureVerificationError("bad", "t=1,v1=abc")
        self.assertEqual(self._post().status_code, 400)

    @patch("billing.views.stripe.Webhook.construct_event")
    def test_completed_checkout_confirms_enrollment_once(self, construct_event):
        construct_event.return_value = self._event()

        self.assertEqual(self._post().status_code, 200)
        self.assertEqual(self._post().status_code, 200)

        enrollment = Enrollment.objects.get(stripe_checkout_session_id="cs_test_1")
        self.assertEqual(enrollment.status, "confirmed")
        self.assertEqual(enrollment.application_fee_cents, 2542)
        self.project.refresh_from_db()
        self.assertEqual(self.project.current_students, 1)

    @patch("billing.views.stripe.Webhook.construct_event")
    def test_full_project_is_acknowledged_without_enrolling(self, construct_event):
        Project.objects.filter(id=self.project.id).update(current_students=2)
        construct_event.return_value = self._event()

        with self.assertLogs("billing.views", level="ERROR"):
            response = self._post()

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Enrollment.objects.exists())

    @patch("billing.views.stripe.Webhook.construct_event")
    def test_unpaid_session_is_ignored(self, construct_event):
        construct_event.return_value = self._event(payment_status="unpaid")
        self.assertEqual(self._post().status_code, 200)
        self.assertFalse(Enrollment.objects.exists())


class CheckoutToEnrollmentTests(DjangoTestCase):
    def setUp(self):
        self.mentor = _make_mentor()
        self.student = CustomUser.objects.create_user(email="student@example.com", password="pw")

    def _stub_session(self, get_client):
        create = get_client.return_value.checkout.Session.create
        create.return_value = SimpleNamespace(id="cs_test_9", url="https://checkout.stripe.com/c/pay/cs_test_9")
        return create

    @patch("billing.services.checkout_service.get_client")
    def test_stored_rate_sets_the_session_fee(self, get_client):
        set_commission_rate(0.10)
        project = _make_project(self.mentor, price=Decimal("100.00"))
        create = self._stub_session(get_client)

        result = checkout_service.create_project_checkout(project, self.student, eligibility_check=lambda a: True)

        self.assertEqual(create.call_args.kwargs["payment_intent_data"]["application_fee_amount"], 1000)
        self.assertEqual(result["amount"], 10000)
        self.assertEqual(result["application_fee"], 1000)

    @patch("billing.services.checkout_service.get_client")
    def test_more_than_one_seat_is_refused(self, get_client):
        project = _make_project(self.mentor)
        for quantity in (3, 2, "2", True):
            with self.assertRaises(CheckoutError):
                checkout_service.create_project_checkout(
                    project, self.student, quantity=quantity, eligibility_check=lambda a: True
                )
        get_client.assert_not_called()

    @patch("billing.services.checkout_service.get_client")
    def test_paid_session_takes_the_seat_it_charged_for(self, get_client):
        project = _make_project(self.mentor)
        create = self._stub_session(get_client)

        result = checkout_service.create_project_checkout(project, self.student, eligibility_check=lambda a: True)
        kwargs = create.call_args.kwargs
        self.assertEqual(kwargs["line_items"][0]["quantity"], 1)

        _handle_checkout_session_completed({
            "id": result["session_id"],
            "payment_status": "paid",
            "amount_total": kwargs["line_items"][0]["price_data"]["unit_amount"],
            "currency": result["currency"],
            "metadata": kwargs["metadata"],
        })

        project.refresh_from_db()
        self.assertEqual(project.current_students, 1)
        enrollment = Enrollment.objects.get(stripe_checkout_session_id="cs_test_9")
        self.assertEqual(enrollment.amount_cents, result["amount"])
        self.assertEqual(enrollment.application_fee_cents, result["application_fee"])

    @patch("billing.views.checkout_service.create_project_checkout")
    def test_view_passes_quantity_through_for_refusal(self, create_checkout):
        project = _make_project(self.mentor)
        create_checkout.side_effect = CheckoutError("Only one seat can be purchased per checkout.")
        self.client.force_login(self.student)

        response = self.client.post(
            reverse("billing:create_checkout_session"),
            data=json.dumps({"projectId": project.id, "quantity": 4}),
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(create_checkout.call_args.kwargs["quantity"], 4)


class BillingViewTests(DjangoTestCase):
    def setUp(self):
        self.mentor = _make_mentor()
        self.project = _make_project(self.mentor)
        self.student = CustomUser.objects.create_user(email="student@example.com", password="pw")

    @patch("billing.views.checkout_service.create_project_checkout")
    def test_student_creates_checkout_session(self, create_checkout):
        create_checkout.return_value = {
            "session_id": "cs_test_1",
            "checkout_url": "https://checkout.stripe.com/c/pay/cs_test_1",
            "amount": 29900,
            "currency": "usd",
            "application_fee": 2542,
        }
        self.client.force_login(self.student)

        response = self.client.post(
            reverse("billing:create_checkout_session"),
            data=json.dumps({"projectId": self.project.id}),
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["applicationFee"], 2542)
        self.assertEqual(create_checkout.call_args.args[0], self.project)

    @patch("billing.views.checkout_service.create_project_checkout")
    def test_checkout_refusal_maps_to_status(self, create_checkout):
        create_checkout.side_effect = CheckoutError("This mentor cannot accept payments yet.")
        self.client.force_login(self.student)

        response = self.client.post(
            reverse("billing:create_checkout_session"),
            data=json.dumps({"projectId": self.project.id}),
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "This mentor cannot accept payments yet.")

    def test_checkout_requires_login(self):
        response = self.client.post(
            reverse("billing:create_checkout_session"),
            data=json.dumps({"projectId": self.project.id}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 401)

    def test_account_status_only_for_owner(self):
        other = _make_mentor(email="other@example.com", account_id="acct_other")
        self.client.force_login(other.user)

        response = self.client.get(reverse("billing:connect_account_status", args=["acct_mentor"]))

        self.assertEqual(response.status_code, 403)

    @patch("billing.views.connect_service.retrieve_account_status")
    def test_account_status_for_owner(self, retrieve):
        retrieve.return_value = ConnectedAccountStatus(
            account_id="acct_mentor", details_submitted=True, charges_enabled=True
        )
        self.client.force_login(self.mentor.user)

        response = self.client.get(reverse("billing:connect_account_status", args=["acct_mentor"]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["onboardingStatus"], "charges_enabled")

    @patch("billing.views.connect_service.retrieve_account_status")
    def test_account_status_missing_account(self, retrieve):
        retrieve.side_effect = AccountNotFound("Account not found", detail="No such account")
        self.client.force_login(self.mentor.user)

        response = self.client.get(reverse("billing:connect_account_status", args=["acct_mentor"]))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["details"], "No such account")
