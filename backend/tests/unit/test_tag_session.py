import pytest

from spark.domain.identity.models import InterestSet
from spark.domain.proximity import codec
from spark.domain.proximity.exceptions import InvalidTransition
from spark.domain.proximity.models import (
	MULTIPLE_TAGS_ADVISORY,
	Action,
	CapabilityQueryFailed,
	CapabilityReported,
	ConnectFailed,
	ConnectSucceeded,
	DiscoveryFailed,
	FailureReason,
	Invalidate,
	MessageMissing,
	MessageRead,
	SessionMode,
	SessionState,
	StartRequested,
	TagCapability,
	TagsDetected,
	TimedOut,
	UserCancelled,
	WriteFailed,
	WriteSucceeded,
)
from spark.domain.proximity.session import TagSession


def _to_status_queried(session: TagSession, capability: TagCapability):
	session.handle_event(StartRequested())
	session.handle_event(TagsDetected(("tag",)))
	session.handle_event(ConnectSucceeded())
	return session.handle_event(CapabilityReported(capability))


def test_unavailable_transport_fails_immediately():
	session = TagSession()
	transition = session.handle_event(StartRequested(available=False))
	assert transition.state is SessionState.FAILED
	assert session.reason is FailureReason.UNSUPPORTED_HARDWARE
	assert transition.action is Action.RELEASE


def test_read_happy_path_records_every_state():
	session = TagSession()
	assert session.mode is SessionMode.READ
	assert session.handle_event(StartRequested()).action is Action.DISCOVER
	assert session.handle_event(TagsDetected(("tag",))).action is Action.CONNECT
	assert session.tag == "tag"
	assert session.handle_event(ConnectSucceeded()).action is Action.QUERY_CAPABILITY
	assert session.handle_event(CapabilityReported(TagCapability.READ_WRITE)).action is Action.READ
	payload = codec.encode("bob", InterestSet(academic=("Math",), media=("Music",)))
	transition = session.handle_event(MessageRead((payload,)))
	assert transition.state is SessionState.COMPLETED
	assert session.history == [
		SessionState.IDLE,
		SessionState.SESSION_ACTIVE,
		SessionState.TAG_DETECTED,
		SessionState.CONNECTED,
		SessionState.STATUS_QUERIED,
		SessionState.READING,
		SessionState.COMPLETED,
	]
	result = session.result
	assert result.ok
	assert result.username == "bob"
	assert result.interests.media == ("Music",)


def test_multiple_tags_stay_active_and_request_retry():
	session = TagSession()
	session.handle_event(StartRequested())
	transition = session.handle_event(TagsDetected(("a", "b")))
	assert transition.state is SessionState.SESSION_ACTIVE
	assert transition.action is Action.RETRY_DISCOVERY
	assert transition.advisory == MULTIPLE_TAGS_ADVISORY
	assert not transition.terminal
	# A later single-tag scan proceeds normally.
	assert session.handle_event(TagsDetected(("a",))).state is SessionState.TAG_DETECTED


def test_empty_scan_fails_with_no_tag():
	session = TagSession()
	session.handle_event(StartRequested())
	session.handle_event(TagsDetected(()))
	assert session.reason is FailureReason.NO_TAG


def test_discovery_error_is_reported():
	session = TagSession()
	session.handle_event(StartRequested())
	transition = session.handle_event(DiscoveryFailed("radio busy"))
	assert transition.reason is FailureReason.DISCOVERY_ERROR
	assert transition.detail == "radio busy"


def test_connect_error():
	session = TagSession()
	session.handle_event(StartRequested())
	session.handle_event(TagsDetected(("tag",)))
	session.handle_event(ConnectFailed("lost"))
	assert session.reason is FailureReason.CONNECT_ERROR
	assert session.detail == "lost"


def test_capability_query_error():
	session = TagSession()
	session.handle_event(StartRequested())
	session.handle_event(TagsDetected(("tag",)))
	session.handle_event(ConnectSucceeded())
	session.handle_event(CapabilityQueryFailed("timeout"))
	assert session.reason is FailureReason.QUERY_ERROR


def test_unsupported_tag_is_incompatible():
	session = TagSession()
	transition = _to_status_queried(session, TagCapability.NOT_SUPPORTED)
	assert transition.reason is FailureReason.INCOMPATIBLE
	assert SessionState.STATUS_QUERIED in session.history


def test_read_only_tag_refuses_write():
	session = TagSession.for_write("alice", InterestSet.default())
	transition = _to_status_queried(session, TagCapability.READ_ONLY)
	assert transition.state is SessionState.FAILED
	assert session.reason is FailureReason.READ_ONLY_TAG


def test_read_only_tag_can_be_read():
	session = TagSession()
	transition = _to_status_queried(session, TagCapability.READ_ONLY)
	assert transition.state is SessionState.READING


def test_write_path_completes_on_ack():
	session = TagSession.for_write("alice", InterestSet.default())
	assert session.mode is SessionMode.WRITE
	assert session.payload == codec.encode("alice", InterestSet.default())
	transition = _to_status_queried(session, TagCapability.READ_WRITE)
	assert transition.action is Action.WRITE
	session.handle_event(WriteSucceeded())
	assert session.result.written


def test_write_failure():
	session = TagSession.for_write("alice", InterestSet.default())
	_to_status_queried(session, TagCapability.READ_WRITE)
	session.handle_event(WriteFailed("tag moved"))
	assert session.reason is FailureReason.WRITE_ERROR
	assert not session.result.ok


def test_missing_message_and_empty_records():
	missing = TagSession()
	_to_status_queried(missing, TagCapability.READ_WRITE)
	missing.handle_event(MessageMissing())
	assert missing.reason is FailureReason.NO_MESSAGE

	empty = TagSession()
	_to_status_queried(empty, TagCapability.READ_WRITE)
	empty.handle_event(MessageRead(()))
	assert empty.reason is FailureReason.NO_MESSAGE


def test_undecodable_message_fails_with_decode_error():
	session = TagSession()
	_to_status_queried(session, TagCapability.READ_WRITE)
	session.handle_event(MessageRead((b"Academic Interests: Math",)))
	assert session.reason is FailureReason.DECODE_ERROR
	assert session.detail == "username_missing"


@pytest.mark.parametrize(
	"event, reason",
	[
		(Invalidate(), FailureReason.CANCELLED),
		(UserCancelled(), FailureReason.USER_CANCELLED),
		(TimedOut(), FailureReason.TIMEOUT),
	],
)
def test_interrupts_end_an_active_session(event, reason):
	session = TagSession()
	session.handle_event(StartRequested())
	transition = session.handle_event(event)
	assert transition.state is SessionState.FAILED
	assert transition.action is Action.RELEASE
	assert session.reason is reason


def test_terminal_session_ignores_invalidate_and_rejects_other_events():
	session = TagSession()
	session.handle_event(StartRequested(available=False))
	transition = session.handle_event(Invalidate())
	assert transition.state is SessionState.FAILED
	assert session.reason is FailureReason.UNSUPPORTED_HARDWARE
	with pytest.raises(InvalidTransition):
		session.handle_event(TagsDetected(("tag",)))


def test_out_of_order_event_is_rejected():
	session = TagSession()
	with pytest.raises(InvalidTransition):
		session.handle_event(ConnectSucceeded())
