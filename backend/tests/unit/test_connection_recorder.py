import pytest

from spark.domain.identity.exceptions import NoSharedInterests
from spark.domain.identity.models import Coordinate, InterestSet
from spark.domain.identity.recorder import Cancel, ConfirmConnect, ConnectionRecorder, EncounterStatus
from spark.domain.proximity.models import FailureReason, SessionMode, SessionState
from spark.domain.proximity.session import SessionResult


class ScriptedPrompt:
	def __init__(self, decision):
		self.decision = decision
		self.asked = []

	async def confirm(self, username, shared_interests):
		self.asked.append((username, list(shared_interests)))
		return self.decision


@pytest.fixture
def signed_in(store):
	store.add_profile("alice", "pw")
	store.authenticate("alice", "pw")
	return store


@pytest.mark.asyncio
async def test_confirmed_encounter_records_connection(signed_in):
	prompt = ScriptedPrompt(ConfirmConnect(photo=b"jpeg", coordinate=Coordinate(45.5, -73.57)))
	recorder = ConnectionRecorder(signed_in, prompt)

	outcome = await recorder.handle_encounter("bob", InterestSet(academic=("Math",), media=("Jazz",)))

	assert outcome.status is EncounterStatus.CONNECTED
	assert outcome.shared_interests == ["Math"]
	assert prompt.asked == [("bob", ["Math"])]
	[connection] = signed_in.current_user.connections
	assert connection is outcome.connection
	assert connection.photo == b"jpeg"
	assert connection.coordinate == Coordinate(45.5, -73.57)


@pytest.mark.asyncio
async def test_declined_encounter_leaves_store_untouched(signed_in, memory_kv):
	before = memory_kv.load("UserProfiles")
	recorder = ConnectionRecorder(signed_in, ScriptedPrompt(Cancel()))

	outcome = await recorder.handle_encounter("bob", InterestSet.default())

	assert outcome.status is EncounterStatus.DECLINED
	assert signed_in.current_user.connections == []
	assert memory_kv.load("UserProfiles") == before


@pytest.mark.asyncio
async def test_no_shared_interests_skips_prompt(signed_in):
	prompt = ScriptedPrompt(ConfirmConnect())
	recorder = ConnectionRecorder(signed_in, prompt)

	outcome = await recorder.handle_encounter("bob", InterestSet(academic=("Latin",)))

	assert outcome.status is EncounterStatus.NO_SHARED_INTERESTS
	assert prompt.asked == []


@pytest.mark.asyncio
async def test_record_requires_shared_interests(signed_in):
	recorder = ConnectionRecorder(signed_in, ScriptedPrompt(ConfirmConnect()))
	with pytest.raises(NoSharedInterests):
		await recorder.record("bob", [])


@pytest.mark.asyncio
async def test_encounter_without_current_user(store):
	recorder = ConnectionRecorder(store, ScriptedPrompt(ConfirmConnect()))
	outcome = await recorder.handle_encounter("bob", InterestSet.default())
	assert outcome.status is EncounterStatus.NO_CURRENT_USER


@pytest.mark.asyncio
async def test_session_results_feed_encounters(signed_in):
	recorder = ConnectionRecorder(signed_in, ScriptedPrompt(ConfirmConnect()))

	failed = SessionResult(SessionMode.READ, SessionState.FAILED, reason=FailureReason.TIMEOUT)
	assert (await recorder.handle_session_result(failed)).status is EncounterStatus.SESSION_FAILED

	read = SessionResult(
		SessionMode.READ,
		SessionState.COMPLETED,
		username="bob",
		interests=InterestSet(sports=("Football",)),
	)
	outcome = await recorder.handle_session_result(read)
	assert outcome.status is EncounterStatus.CONNECTED
	assert signed_in.current_user.connections[0].username == "bob"
