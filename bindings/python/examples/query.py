"""Open a database, run a few Cypher queries and print the decoded results."""

from __future__ import annotations

import tempfile
from pathlib import Path

from metrix import Database, MetrixError, format_cell_value


def temp_db_path() -> str:
    directory = Path(tempfile.mkdtemp())
    return str(directory / "graph.mx")


def main() -> None:
    with Database.open(temp_db_path()) as db:
        db.execute("CREATE (a:Person {name: 'Ada'})-[:KNOWS {since: 2020}]->(b:Person {name: 'Grace'})")

        result = db.execute("MATCH (n)-[r]->(m) RETURN n, r, m.name")
        print("Columns:", result.columns())
        for row in result.rows():
            print("Row:", [format_cell_value(value) for value in row])
        for node in result.nodes():
            print("Node:", node["id"], node["label"], node["properties"])
        for edge in result.edges():
            print("Edge:", edge["source"], "->", edge["target"], edge["label"])
        print(f"Took {result.duration_ms()} ms")

        try:
            db.execute("MATC (n) RETURN n")
        except MetrixError as err:
            print(f"Expected failure [{err.code}]: {err}")


if __name__ == "__main__":
    main()
