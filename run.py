from scoreline import create_app, db
from scoreline.models import Fixture, Group, Prediction, Round, StandingsSnapshot, User

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "Group": Group,
        "Round": Round,
        "Fixture": Fixture,
        "Prediction": Prediction,
        "StandingsSnapshot": StandingsSnapshot,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
