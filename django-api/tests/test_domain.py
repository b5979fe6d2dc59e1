"""Unit tests for domain primitives.

These test invariants that must hold at construction time, plus the pure
phase table and the upload policy.
Run with: pytest tests/test_domain.py -v
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from events.domain import (
    EventId,
    EventPhase,
    Guest,
    GuestLimit,
    Money,
    PaymentInfo,
    PhaseAction,
    PromoFile,
    PromoMaterials,
    Submission,
    SubmissionId,
    TimeslotId,
    Venue,
)
from events.domain.commands import EVENT_PATCH_FIELDS, FileUpload, Patch
from events.domain.errors import ValidationError
from events.domain.files import check_file, file_extension, format_file_size, validate_files
from events.domain.models import SUBMISSION_TOKEN_MAX_LENGTH, Milestones
from events.domain.phases import (
    TRANSITIONS,
    Capabilities,
    Precondition,
    compute_capabilities,
    find_transition,
    get_available_actions,
)
from events.services.token_issuer import TOKEN_ALPHABET, TokenIssuer, is_well_formed, tokens_match

NOW = datetime(2026, 11, 1, 12, 0, tzinfo=timezone.utc)


class TestMoney:
    """Tests for Money value object."""

    def test_money_accepts_positive_amount(self):
        assert Money(Decimal("10.50")).amount == Decimal("10.50")

    def test_money_accepts_zero(self):
        assert Money(Decimal("0")).amount == 0

    def test_money_rejects_negative_amount(self):
        with pytest.raises(ValueError):
            Money(Decimal("-0.01"))

    def test_money_str_format(self):
        assert str(Money(Decimal("300"))) == "300.00"


class TestGuestLimit:
    def test_accepts_zero(self):
        assert GuestLimit(0).value == 0

    def test_rejects_negative_value(self):
        with pytest.raises(ValueError):
            GuestLimit(-1)


class TestVenue:
    def test_rejects_blank_name(self):
        with pytest.raises(ValueError, match="name"):
            Venue(name="  ", address="12 Dock Road")

    def test_rejects_blank_address(self):
        with pytest.raises(ValueError, match="address"):
            Venue(name="The Depot", address="")


class TestEventId:
    """Tests for EventId value object."""

    def test_from_string_valid_uuid(self):
        raw = uuid.uuid4()
        assert EventId.from_string(str(raw)).value == raw
        assert str(EventId(raw)) == str(raw)

    def test_from_string_invalid_uuid(self):
        with pytest.raises(ValueError):
            EventId.from_string("not-a-uuid")


class TestPatch:
    def test_records_only_supplied_fields(self):
        patch = Patch.of(name="New name")
        assert "name" in patch
        assert "date" not in patch
        assert patch.get("date") is None

    def test_empty_patch_is_falsy(self):
        assert not Patch.of()

    def test_unknown_fields_are_reported_sorted(self):
        patch = Patch.of(phase="completed", name="x", organizer_id="y")
        assert patch.unknown_fields(EVENT_PATCH_FIELDS) == ["organizer_id", "phase"]

    def test_changes_are_read_only(self):
        patch = Patch.of(name="x")
        with pytest.raises(TypeError):
            patch.changes["name"] = "y"


class TestPhaseTable:
    def test_forward_edges(self):
        assert find_transition(EventPhase.DRAFT, EventPhase.PLANNING).action is (
            PhaseAction.PUBLISH_EVENT
        )
        assert find_transition(EventPhase.PLANNING, EventPhase.FINALIZED).action is (
            PhaseAction.FINALIZE_EVENT
        )
        assert find_transition(EventPhase.FINALIZED, EventPhase.DAY_OF).action is (
            PhaseAction.START_EVENT_DAY
        )
        assert find_transition(EventPhase.DAY_OF, EventPhase.COMPLETED).action is (
            PhaseAction.COMPLETE_EVENT
        )

    @pytest.mark.parametrize(
        "phase",
        [EventPhase.DRAFT, EventPhase.PLANNING, EventPhase.FINALIZED, EventPhase.DAY_OF],
    )
    def test_cancel_from_every_non_terminal_phase(self, phase):
        transition = find_transition(phase, EventPhase.CANCELLED)
        assert transition.action is PhaseAction.CANCEL_EVENT
        assert transition.preconditions == ()

    @pytest.mark.parametrize("phase", [EventPhase.COMPLETED, EventPhase.CANCELLED])
    def test_terminal_phases_have_no_exits(self, phase):
        assert phase.is_terminal
        assert [t for t in TRANSITIONS if t.source is phase] == []

    def test_same_phase_is_not_an_edge(self):
        assert all(find_transition(p, p) is None for p in EventPhase)

    def test_skipping_and_going_back_are_not_edges(self):
        assert find_transition(EventPhase.DRAFT, EventPhase.FINALIZED) is None
        assert find_transition(EventPhase.PLANNING, EventPhase.DRAFT) is None

    def test_preconditions_are_named(self):
        by_action = {t.action: t.preconditions for t in TRANSITIONS}
        assert by_action[PhaseAction.PUBLISH_EVENT] == (
            Precondition.HAS_TIMESLOTS,
            Precondition.HAS_REQUIRED_INFO,
        )
        assert by_action[PhaseAction.FINALIZE_EVENT] == (Precondition.HAS_ALL_SUBMISSIONS,)
        assert by_action[PhaseAction.START_EVENT_DAY] == (Precondition.EVENT_DAY_REACHED,)


class TestCapabilities:
    def _compute(self, timeslots=2, complete=2, today=date(2026, 11, 20)):
        return compute_capabilities(
            has_required_info=True,
            timeslot_count=timeslots,
            complete_submission_count=complete,
            event_date=date(2026, 11, 20),
            today=today,
        )

    def test_all_submissions_needs_at_least_one_timeslot(self):
        caps = self._compute(timeslots=0, complete=0)
        assert not caps.has_timeslots
        assert not caps.has_all_submissions

    def test_partial_submissions(self):
        assert not self._compute(timeslots=2, complete=1).has_all_submissions

    def test_every_timeslot_complete(self):
        assert self._compute(timeslots=2, complete=2).has_all_submissions

    def test_event_day_reached_on_the_day(self):
        assert self._compute(today=date(2026, 11, 20)).event_day_reached
        assert not self._compute(today=date(2026, 11, 19)).event_day_reached

    def test_unmet_lists_failing_preconditions(self):
        caps = Capabilities(has_timeslots=False, has_required_info=True)
        publish = find_transition(EventPhase.DRAFT, EventPhase.PLANNING)
        assert caps.unmet(publish) == [Precondition.HAS_TIMESLOTS]


class TestAvailableActions:
    def test_draft_ready_to_publish(self):
        caps = Capabilities(has_timeslots=True, has_required_info=True)
        actions = get_available_actions(EventPhase.DRAFT, caps)
        assert [a.action for a in actions] == [
            PhaseAction.PUBLISH_EVENT,
            PhaseAction.CANCEL_EVENT,
        ]
        publish, cancel = actions
        assert publish.target is EventPhase.PLANNING
        assert publish.label == "Publish Event"
        assert publish.confirm_required
        assert not publish.destructive
        assert cancel.destructive
        assert cancel.confirm_message == "Are you sure you want to cancel this event?"

    def test_draft_without_timeslots_can_only_cancel(self):
        actions = get_available_actions(EventPhase.DRAFT, Capabilities(has_required_info=True))
        assert [a.action for a in actions] == [PhaseAction.CANCEL_EVENT]

    def test_start_event_day_needs_no_confirmation(self):
        caps = Capabilities(event_day_reached=True)
        actions = get_available_actions(EventPhase.FINALIZED, caps)
        start = actions[0]
        assert start.action is PhaseAction.START_EVENT_DAY
        assert not start.confirm_required
        assert actions[-1].confirm_message.endswith("DJs have been booked.")

    def test_finalize_message_matches_open_submissions(self):
        caps = Capabilities(has_all_submissions=True)
        finalize = get_available_actions(EventPhase.PLANNING, caps)[0]
        assert finalize.action is PhaseAction.FINALIZE_EVENT
        assert "prevent further submissions" not in finalize.confirm_message
        assert "can still update" in finalize.confirm_message

    def test_day_of_offers_complete_and_cancel(self):
        actions = get_available_actions(EventPhase.DAY_OF, Capabilities())
        assert [a.action for a in actions] == [
            PhaseAction.COMPLETE_EVENT,
            PhaseAction.CANCEL_EVENT,
        ]

    @pytest.mark.parametrize("phase", [EventPhase.COMPLETED, EventPhase.CANCELLED])
    def test_terminal_phases_offer_nothing(self, phase):
        caps = Capabilities(True, True, True, True)
        assert get_available_actions(phase, caps) == []

    def test_is_pure(self):
        caps = Capabilities(has_timeslots=True, has_required_info=True)
        assert get_available_actions(EventPhase.DRAFT, caps) == get_available_actions(
            EventPhase.DRAFT, caps
        )


class TestMilestones:
    def test_stamped_sets_the_phase_milestone(self):
        stamped = Milestones().stamped(EventPhase.PLANNING, NOW)
        assert stamped.published_at == NOW
        assert stamped.cancelled_at is None

    def test_draft_has_no_milestone(self):
        assert Milestones().stamped(EventPhase.DRAFT, NOW) == Milestones()


class TestSubmissionCompleteness:
    def _submission(self, files, guests):
        return Submission(
            id=SubmissionId(uuid.uuid4()),
            event_id=EventId(uuid.uuid4()),
            timeslot_id=TimeslotId(uuid.uuid4()),
            unique_link="abc",
            promo_materials=PromoMaterials(files=files),
            guest_list=guests,
            payment_info=PaymentInfo("A", "B", "1", "2"),
            submitted_at=NOW,
            last_updated_at=NOW,
        )

    def test_needs_files_and_guests(self):
        promo = PromoFile("a.jpg", "image/jpeg", 1, "ref", NOW)
        assert self._submission((promo,), (Guest("Alex"),)).is_complete()
        assert not self._submission((), (Guest("Alex"),)).is_complete()
        assert not self._submission((promo,), ()).is_complete()
        assert not self._submission((promo,), ()).is_complete(GuestLimit(5))

    def test_no_guests_needed_when_none_allowed(self):
        promo = PromoFile("a.jpg", "image/jpeg", 1, "ref", NOW)
        assert self._submission((promo,), ()).is_complete(GuestLimit(0))
        assert not self._submission((), ()).is_complete(GuestLimit(0))


class TestFilePolicy:
    def test_accepts_matching_extension(self):
        assert check_file(FileUpload("poster.JPEG", "image/jpeg", 1024, "ref")) is None

    def test_quicktime_accepts_mov(self):
        assert check_file(FileUpload("clip.mov", "video/quicktime", 1024, "ref")) is None

    def test_extension_mismatch_names_expected_set(self):
        problem = check_file(FileUpload("poster.png", "image/jpeg", 1024, "ref"))
        assert problem == (
            "File extension 'png' does not match MIME type 'image/jpeg'. Expected: jpg, jpeg"
        )

    def test_rejects_oversized_file(self):
        problem = check_file(FileUpload("mix.mp4", "video/mp4", 60 * 1024 * 1024, "ref"))
        assert problem == "File size 60 MB exceeds maximum allowed size of 50 MB"

    def test_accepts_exactly_max_size(self):
        assert check_file(FileUpload("mix.mp4", "video/mp4", 50 * 1024 * 1024, "ref")) is None

    def test_rejects_negative_size(self):
        assert check_file(FileUpload("a.jpg", "image/jpeg", -1, "ref")) is not None

    def test_rejects_unlisted_type(self):
        problem = check_file(FileUpload("notes.txt", "text/plain", 10, "ref"))
        assert problem.startswith("File type text/plain is not allowed")

    def test_rejects_malformed_mime(self):
        assert check_file(FileUpload("a.jpg", "jpeg", 10, "ref")) == "Invalid MIME type format"

    def test_validate_files_names_the_file(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_files([FileUpload("poster.png", "image/jpeg", 10, "ref")])
        assert exc_info.value.message.startswith('File "poster.png": File extension')
        assert exc_info.value.field == "files"

    def test_helpers(self):
        assert file_extension("archive.tar.GZ") == "gz"
        assert file_extension("README") == ""
        assert format_file_size(512) == "512 B"
        assert format_file_size(2048) == "2 KB"


class TestTokenIssuer:
    def test_tokens_have_fixed_length_and_alphabet(self):
        issuer = TokenIssuer()
        token = issuer.issue()
        assert len(token) == 16
        assert set(token) <= set(TOKEN_ALPHABET)
        assert is_well_formed(token)

    def test_alphabet_is_alphanumeric(self):
        assert len(TOKEN_ALPHABET) == 62
        assert TOKEN_ALPHABET.isalnum()

    def test_tokens_differ(self):
        issuer = TokenIssuer()
        assert len({issuer.issue() for _ in range(200)}) == 200

    def test_custom_length(self):
        assert len(TokenIssuer(length=24).issue()) == 24

    @pytest.mark.parametrize("length", [0, SUBMISSION_TOKEN_MAX_LENGTH + 1])
    def test_rejects_length_the_column_cannot_hold(self, length):
        with pytest.raises(ValueError):
            TokenIssuer(length=length)

    def test_longest_length_fits_the_column(self):
        assert len(TokenIssuer(length=SUBMISSION_TOKEN_MAX_LENGTH).issue()) == 64

    @pytest.mark.parametrize(
        "token", ["", None, "ab-d", "abc/../x", "A" * (SUBMISSION_TOKEN_MAX_LENGTH + 1)]
    )
    def test_is_well_formed_rejects(self, token):
        assert not is_well_formed(token)

    def test_is_well_formed_accepts_any_issued_length(self):
        assert is_well_formed(TokenIssuer(length=4).issue())
        assert is_well_formed(TokenIssuer(length=32).issue())

    def test_tokens_match_is_exact(self):
        assert tokens_match("AbC123", "AbC123")
        assert not tokens_match("AbC123", "abc123")
        assert not tokens_match(None, "AbC123")
        assert not tokens_match("AbC123", "")
