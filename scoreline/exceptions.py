"""
Scoreline exceptions

Round-level errors (NotFound, InvalidState, IncompleteData) abort the whole
operation with no writes. DataCorruption is row-level: the scoring service
logs it and keeps going.
"""


class ScorelineError(Exception):
    """Base class for all domain errors"""

    status_code = 400

    @property
    def kind(self):
        return type(self).__name__

    def to_dict(self):
        return {"error": self.kind, "message": str(self)}


class NotFound(ScorelineError):
    """A round, fixture, group or user does not exist"""

    status_code = 404

    def __init__(self, entity, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class InvalidState(ScorelineError):
    """Operation requested against a round in the wrong lifecycle state"""

    status_code = 409


class IncompleteData(ScorelineError):
    """One or more fixtures of a round have no result yet"""

    status_code = 422

    def __init__(self, round_id, fixture_ids):
        self.round_id = round_id
        self.fixture_ids = sorted(fixture_ids)
        missing = ", ".join(str(fixture_id) for fixture_id in self.fixture_ids)
        super().__init__(
            f"Cannot score round {round_id}. Results missing for fixtures: {missing}"
        )

    def to_dict(self):
        data = super().to_dict()
        data["fixture_ids"] = self.fixture_ids
        return data


class DataCorruption(ScorelineError):
    """A single prediction or fixture holds invalid score data"""

    def __init__(self, prediction_id, detail):
        self.prediction_id = prediction_id
        super().__init__(f"Prediction {prediction_id} has invalid score data: {detail}")
