"""
HTTP tests for the scoring routes.
"""
import pytest
from fastapi.testclient import TestClient

from main import app
from app.api.match import get_match_session


@pytest.fixture
def client(session):
    app.dependency_overrides[get_match_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


def start_match(client: TestClient, overs_limit=None):
    client.post("/api/createTeams", json={"teamA": {"name": "Lions"}, "teamB": {"name": "Tigers"}})
    response = client.post("/api/setTeamsAndMatch", json={
        "battingTeam": "teamA",
        "openingStriker": "A1",
        "openingNonStriker": "A2",
        "startingBowler": "B1",
        "oversLimit": overs_limit,
    })
    assert response.status_code == 200
    return response.json()


class TestReadRoutes:

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "healthy"}

    def test_initial_score(self, client):
        data = client.get("/api/score").json()
        assert data["setupPhase"] == "teams"
        assert data["matchStarted"] is False
        assert data["availablePlayers"]["teamA"] == ["A1", "A2", "A3", "A4"]
        assert data["rosterSize"] == 11
        assert data["innings1Card"] is None
        assert data["requiredRate"] is None
        assert data["log"] == []

    def test_players(self, client):
        data = client.get("/api/players").json()
        assert data == {
            "teamA": ["A1", "A2", "A3", "A4"],
            "teamB": ["B1", "B2", "B3", "B4"],
        }


class TestSetupRoutes:

    def test_create_teams(self, client):
        response = client.post("/api/createTeams", json={
            "teamA": {"name": "Lions"},
            "teamB": {"name": "Tigers"},
        })
        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["message"] == "Teams created"
        assert body["state"]["teams"] == {"teamA": {"name": "Lions"}, "teamB": {"name": "Tigers"}}
        assert body["state"]["setupPhase"] == "innings_setup"

    def test_create_teams_with_player_list(self, client):
        response = client.post("/api/createTeams", json={"players": ["P1", "P2", "P1", " "]})
        players = response.json()["state"]["availablePlayers"]
        assert players == {"teamA": ["P1", "P2"], "teamB": ["P1", "P2"]}

    def test_start_innings(self, client):
        body = start_match(client, overs_limit="2.3")
        state = body["state"]
        assert body["message"] == "Innings started"
        assert state["matchStarted"] is True
        assert state["striker"] == "A1"
        assert state["nonStriker"] == "A2"
        assert state["currentBowler"] == "B1"
        assert state["matchBallLimit"] == 15
        assert state["ballsRemaining"] == 15

    def test_start_innings_missing_parameters(self, client):
        client.post("/api/createTeams", json={})
        response = client.post("/api/setTeamsAndMatch", json={"battingTeam": "teamA"})
        assert response.status_code == 400
        assert response.json()["message"] == "Missing parameters"
        assert response.json()["errorKind"] == "validation"


class TestScoringRoutes:

    def test_boundary_four(self, client):
        start_match(client)
        body = client.post("/api/run/4").json()
        state = body["state"]
        assert body["message"] == "Run updated"
        assert state["score"] == 4
        assert state["overs"] == "0.1"
        assert state["runRate"] == 24.0
        assert state["thisOver"] == ["4"]
        batsman = state["players"][0]
        assert batsman["name"] == "A1"
        assert batsman["runs"] == 4
        assert batsman["fours"] == 1
        assert batsman["strikeRate"] == "400.00"
        assert state["bowlers"][0]["economy"] == "24.00"

    def test_invalid_run_value(self, client):
        start_match(client)
        response = client.post("/api/run/abc")
        body = response.json()
        assert response.status_code == 400
        assert body["success"] is False
        assert body["message"] == "Invalid runs"
        assert body["state"]["score"] == 0

    def test_run_before_start(self, client):
        response = client.post("/api/run/1")
        assert response.status_code == 400
        assert response.json()["errorKind"] == "precondition"

    def test_no_ball_with_string_runs(self, client):
        start_match(client)
        state = client.post("/api/extras", json={"type": "noball", "extraRuns": "2"}).json()["state"]
        assert state["score"] == 3
        assert state["balls"] == 0
        assert state["extras"] == 1
        assert state["bowlers"][0]["noBalls"] == 1
        assert state["thisOver"] == ["Nb+2"]

    def test_invalid_extra_type(self, client):
        start_match(client)
        response = client.post("/api/extras", json={"type": "bye"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid extra type"

    def test_wicket_and_new_batsman(self, client):
        start_match(client)
        body = client.post("/api/wicket", json={"wicketType": "caught"}).json()
        assert body["details"] == {"awaitingNewBatsman": True}
        assert body["state"]["fallOfWickets"] == [{
            "player": "A1", "wicketType": "caught", "score": 0, "wickets": 1, "overs": "0.1",
        }]

        body = client.post("/api/newBatsman", json={"name": "A3"}).json()
        assert body["message"] == "New batsman added"
        assert body["state"]["striker"] == "A3"
        assert body["state"]["battingOrder"] == ["A1", "A2", "A3"]

    def test_wicket_type_required(self, client):
        start_match(client)
        response = client.post("/api/wicket", json={})
        assert response.status_code == 400
        assert response.json()["message"] == "wicketType required"

    def test_last_man_standing(self, client):
        start_match(client)
        client.post("/api/wicket", json={"wicketType": "bowled"})
        body = client.post("/api/lastManStanding", json={"useLastMan": True}).json()
        assert body["state"]["lastManStandingMode"] is True
        assert body["state"]["striker"] == "A2"
        assert body["state"]["nonStriker"] is None

    def test_last_man_standing_must_be_requested(self, client):
        start_match(client)
        client.post("/api/wicket", json={"wicketType": "bowled"})
        response = client.post("/api/lastManStanding", json={"useLastMan": False})
        assert response.status_code == 400
        assert response.json()["state"]["lastManStandingMode"] is False

    def test_batsman_cannot_bowl(self, client):
        start_match(client)
        response = client.post("/api/selectBowler", json={"bowler": "A2"})
        assert response.status_code == 409
        assert response.json()["errorKind"] == "conflict"

    def test_next_bowler_after_over(self, client):
        start_match(client)
        for _ in range(6):
            client.post("/api/run/0")
        body = client.post("/api/selectBowler", json={"bowler": "B1"}).json()
        assert body["details"] == {"resumed": True, "warningSame": True}
        assert body["state"]["bowlers"][0]["maidens"] == 1
        assert body["state"]["matchStarted"] is True

    def test_change_strike(self, client):
        start_match(client)
        body = client.post("/api/changeStrike", json={"action": "swap"}).json()
        assert body["state"]["striker"] == "A2"

        response = client.post("/api/changeStrike", json={"action": "rotate"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid action"


class TestInningsRoutes:

    def test_full_match(self, client):
        start_match(client)
        client.post("/api/run/6")
        body = client.post("/api/endInnings").json()
        assert body["details"] == {"target": 7}
        assert body["state"]["innings"] == 2
        assert body["state"]["innings1Score"]["score"] == 6
        assert body["state"]["innings1Card"]["players"][0]["runs"] == 6

        client.post("/api/setTeamsAndMatch", json={
            "openingStriker": "B1",
            "openingNonStriker": "B2",
            "startingBowler": "A1",
            "battingTeam": "teamB",
            "oversLimit": "20",
        })
        state = client.get("/api/score").json()
        assert state["battingTeam"] == "teamB"
        assert state["ballsRemaining"] == 120
        assert state["requiredRate"] == 0.35

        body = client.post("/api/run/6").json()
        assert body["state"]["finalResult"] is None
        body = client.post("/api/run/1").json()
        assert body["message"] == "Match ended"
        assert body["details"] == {"finalResult": "Tigers WIN by 11 wickets!"}
        assert body["state"]["setupPhase"] == "finished"

        response = client.post("/api/run/1")
        assert response.status_code == 400
        assert response.json()["message"] == "Match already finished"


class TestHistoryRoutes:

    def test_undo(self, client):
        start_match(client)
        client.post("/api/run/4")
        body = client.post("/api/undo").json()
        assert body["message"] == "Undo successful"
        assert body["state"]["score"] == 0
        assert body["state"]["players"][0]["runs"] == 0

    def test_undo_with_empty_history(self, client):
        response = client.post("/api/undo")
        assert response.status_code == 400
        assert response.json()["errorKind"] == "empty_history"

    def test_reset(self, client):
        start_match(client)
        client.post("/api/run/2")
        body = client.post("/api/reset").json()
        assert body["message"] == "Reset done"
        assert body["state"]["setupPhase"] == "teams"
        assert body["state"]["score"] == 0
        assert client.post("/api/undo").status_code == 400
