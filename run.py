from pickcrown import create_app, db
from pickcrown.models import Category, Event, Matchup, Pool, PoolEntry, Season, Team

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "Season": Season,
        "Event": Event,
        "Pool": Pool,
        "PoolEntry": PoolEntry,
        "Category": Category,
        "Team": Team,
        "Matchup": Matchup,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
