"""CSV dataset ingestion into Neo4j. MERGE-based and idempotent.

Datasets are recognized through a small registry: each DatasetLoader
matches the name of the directory a CSV file lives in, and each of its
FileRules matches the file name and knows how to turn a row into MERGE
parameters. Adding a dataset shape means adding a registry entry.

All writes use MERGE (never CREATE), so loading the same files twice
produces the same graph state.
"""

import csv
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from tqdm import tqdm

from marvel_graphrag.config import Config
from marvel_graphrag.graph.schema import create_schema
from marvel_graphrag.graph.store import GraphStore, GraphStoreError

logger = logging.getLogger(__name__)

NODES = "nodes"
RELATIONSHIPS = "relationships"


def _to_int(value: str) -> int:
    """Parse an integer column, falling back to 0 like the source data expects."""
    try:
        return int(value.strip())
    except ValueError:
        return 0


def _cells(row: list[str], *indexes: int) -> list[str]:
    return [row[i].strip() for i in indexes]


@dataclass
class FileRule:
    """How rows of one kind of CSV file become graph writes."""

    match: str
    """Case-insensitive substring of the file name (e.g. 'edges')."""

    kind: str
    """NODES or RELATIONSHIPS; node rules run before relationship rules."""

    statement: str
    """UNWIND $rows statement that MERGEs one batch of rows."""

    min_columns: int
    """Rows with fewer columns are skipped."""

    to_params: Callable[[list[str]], dict]
    """Maps a CSV row to the parameter map of one UNWIND element."""

    accepts: Callable[[list[str]], bool] = lambda row: True
    """Extra row filter (e.g. only rows whose type column is 'hero')."""

    description: str = ""

    def matches(self, file_name: str) -> bool:
        return self.match in file_name.lower()


@dataclass
class DatasetLoader:
    """A known dataset shape, recognized by its directory name."""

    name: str
    rules: list[FileRule]

    def matches(self, dir_name: str) -> bool:
        return self.name in dir_name.lower()

    def rules_for(self, file_name: str) -> list[FileRule]:
        return [rule for rule in self.rules if rule.matches(file_name)]


DATASET_LOADERS: list[DatasetLoader] = [
    DatasetLoader(
        name="marvel_characters_partnerships",
        rules=[
            FileRule(
                match="nodes",
                kind=NODES,
                statement=(
                    "UNWIND $rows AS row "
                    "MERGE (c:Character {id: row.id}) "
                    "SET c.name = row.id, c.group = row.group, c.size = row.size "
                    "RETURN count(*) AS merged"
                ),
                min_columns=3,
                to_params=lambda row: {
                    "group": row[0].strip(),
                    "id": row[1].strip(),
                    "size": _to_int(row[2]),
                },
                accepts=lambda row: bool(row[1].strip()),
                description="characters",
            ),
            FileRule(
                match="edges",
                kind=RELATIONSHIPS,
                statement=(
                    "UNWIND $rows AS row "
                    "MATCH (a:Character {id: row.source}) "
                    "MATCH (b:Character {id: row.target}) "
                    "MERGE (a)-[:PARTNERS_WITH]->(b) "
                    "RETURN count(*) AS merged"
                ),
                min_columns=2,
                to_params=lambda row: dict(zip(("source", "target"), _cells(row, 0, 1))),
                description="partnerships",
            ),
        ],
    ),
    DatasetLoader(
        name="marvel_universe_social_network",
        rules=[
            FileRule(
                match="nodes",
                kind=NODES,
                statement=(
                    "UNWIND $rows AS row "
                    "MERGE (h:Hero {id: row.id}) "
                    "SET h.name = row.id "
                    "RETURN count(*) AS merged"
                ),
                min_columns=2,
                to_params=lambda row: {"id": row[0].strip()},
                accepts=lambda row: row[1].strip() == "hero" and bool(row[0].strip()),
                description="heroes",
            ),
            FileRule(
                match="nodes",
                kind=NODES,
                statement=(
                    "UNWIND $rows AS row "
                    "MERGE (c:Comic {id: row.id}) "
                    "SET c.title = row.id "
                    "RETURN count(*) AS merged"
                ),
                min_columns=2,
                to_params=lambda row: {"id": row[0].strip()},
                accepts=lambda row: row[1].strip() == "comic" and bool(row[0].strip()),
                description="comics",
            ),
            FileRule(
                match="hero-network",
                kind=RELATIONSHIPS,
                statement=(
                    "UNWIND $rows AS row "
                    "MATCH (h1:Hero {id: row.hero1}) "
                    "MATCH (h2:Hero {id: row.hero2}) "
                    "MERGE (h1)-[:KNOWS]->(h2) "
                    "RETURN count(*) AS merged"
                ),
                min_columns=2,
                to_params=lambda row: dict(zip(("hero1", "hero2"), _cells(row, 0, 1))),
                description="hero-to-hero links",
            ),
            FileRule(
                match="edges",
                kind=RELATIONSHIPS,
                statement=(
                    "UNWIND $rows AS row "
                    "MATCH (h:Hero {id: row.hero}) "
                    "MATCH (c:Comic {id: row.comic}) "
                    "MERGE (h)-[:APPEARS_IN]->(c) "
                    "RETURN count(*) AS merged"
                ),
                min_columns=2,
                to_params=lambda row: dict(zip(("hero", "comic"), _cells(row, 0, 1))),
                description="hero-to-comic appearances",
            ),
        ],
    ),
]


def match_file(
    path: Path, loaders: list[DatasetLoader] | None = None
) -> tuple[DatasetLoader, list[FileRule]] | None:
    """Find the dataset loader and file rules that apply to a CSV path.

    Returns:
        (loader, rules) or None if the file belongs to no known dataset.
    """
    for loader in loaders if loaders is not None else DATASET_LOADERS:
        if loader.matches(path.parent.name):
            rules = loader.rules_for(path.name)
            if rules:
                return loader, rules
            return None
    return None


@dataclass
class IngestStats:
    """Outcome of one ingestion run."""

    files_loaded: int = 0
    files_skipped: int = 0
    nodes_merged: int = 0
    relationships_merged: int = 0
    rows_skipped: int = 0
    errors: list[dict] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.errors


def graph_counts(store: GraphStore) -> dict:
    """Count all nodes and relationships in the graph."""
    nodes = store.run("MATCH (n) RETURN count(n) AS count", read_only=True)
    rels = store.run("MATCH ()-[r]->() RETURN count(r) AS count", read_only=True)
    return {"nodes": nodes[0][0], "relationships": rels[0][0]}


class GraphIngestor:
    """Loads the Marvel CSV datasets into Neo4j.

    Walks a directory tree for CSV files, matches each against
    DATASET_LOADERS and MERGEs rows in UNWIND batches. Node files are
    loaded before relationship files so relationship MATCHes find
    their endpoints.
    """

    def __init__(
        self,
        config: Config,
        store: GraphStore,
        loaders: list[DatasetLoader] | None = None,
        progress: bool = True,
    ):
        self.config = config
        self.store = store
        self.loaders = loaders if loaders is not None else DATASET_LOADERS
        self.progress = progress

    # ------------------------------------------------------------------ #
    #  Public API                                                         #
    # ------------------------------------------------------------------ #

    def ingest_directory(self, data_dir: Path, clear: bool = True) -> IngestStats:
        """Ingest every recognized CSV under a directory.

        Args:
            data_dir: Root of the dataset tree.
            clear: Delete all existing nodes and relationships first.

        Returns:
            IngestStats with merge counts and collected per-row errors.

        Raises:
            GraphStoreError: If Neo4j is unreachable while clearing the
                database or creating constraints.
        """
        data_dir = Path(data_dir)
        csv_files = sorted(p for p in data_dir.rglob("*") if p.is_file() and p.suffix.lower() == ".csv")
        logger.info(f"Found {len(csv_files)} CSV files under {data_dir}")

        stats = IngestStats()

        if clear:
            self.clear()
        create_schema(self.store)

        plan = []
        for path in csv_files:
            matched = match_file(path, self.loaders)
            if matched is None:
                logger.warning(f"Skipping unrecognized dataset file: {path}")
                stats.files_skipped += 1
                continue
            loader, rules = matched
            logger.debug(f"{path} -> {loader.name} ({', '.join(r.description for r in rules)})")
            plan.append((path, rules))

        loaded: set[Path] = set()
        for kind in (NODES, RELATIONSHIPS):
            for path, rules in plan:
                kind_rules = [rule for rule in rules if rule.kind == kind]
                if kind_rules and self._load_file(path, kind_rules, stats):
                    loaded.add(path)

        stats.files_loaded = len(loaded)
        stats.files_skipped += len({path for path, _ in plan} - loaded)

        logger.info(
            f"Ingestion complete: {stats.nodes_merged} nodes, "
            f"{stats.relationships_merged} relationships merged, "
            f"{stats.rows_skipped} rows skipped, {len(stats.errors)} errors"
        )
        return stats

    def clear(self) -> None:
        """Delete every node and relationship in the database."""
        self.store.run("MATCH (n) DETACH DELETE n")
        logger.info("Database cleared")

    # ------------------------------------------------------------------ #
    #  File and batch handling                                            #
    # ------------------------------------------------------------------ #

    def _read_rows(self, path: Path, stats: IngestStats) -> list[list[str]] | None:
        try:
            with path.open(newline="", encoding="utf-8") as f:
                records = list(csv.reader(f))
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.error(f"Failed to read {path}: {e}")
            stats.errors.append({"file": str(path), "row": None, "error": str(e)})
            return None

        if len(records) < 2:
            logger.warning(f"Skipping empty file: {path.name}")
            return []
        return records[1:]

    def _load_file(self, path: Path, rules: list[FileRule], stats: IngestStats) -> bool:
        """Load one file with the given rules. Returns False if nothing was read."""
        rows = self._read_rows(path, stats)
        if not rows:
            return False

        batches: dict[int, list[dict]] = {i: [] for i in range(len(rules))}
        for row in rows:
            loaded = False
            for i, rule in enumerate(rules):
                if len(row) >= rule.min_columns and rule.accepts(row):
                    batches[i].append(rule.to_params(row))
                    loaded = True
            if not loaded:
                stats.rows_skipped += 1
                logger.debug(f"Skipping row in {path.name}: {row!r}")

        for i, rule in enumerate(rules):
            params = batches[i]
            if not params:
                continue
            logger.info(f"Loading {len(params)} {rule.description} from {path.name}")
            merged = self._merge_rows(path, rule, params, stats)
            if rule.kind == NODES:
                stats.nodes_merged += merged
            else:
                stats.relationships_merged += merged
        return True

    def _merge_rows(
        self, path: Path, rule: FileRule, params: list[dict], stats: IngestStats
    ) -> int:
        """MERGE rows in batches; replay a failing batch row by row."""
        merged = 0
        size = self.config.batch_size
        for start in tqdm(
            range(0, len(params), size),
            desc=rule.description,
            unit="batch",
            disable=not self.progress,
        ):
            batch = params[start:start + size]
            try:
                merged += self._run_batch(rule, batch)
            except GraphStoreError as e:
                logger.warning(
                    f"Batch of {len(batch)} {rule.description} failed ({e}), retrying row by row"
                )
                for row in batch:
                    try:
                        merged += self._run_batch(rule, [row])
                    except GraphStoreError as row_error:
                        logger.error(f"Failed MERGE {rule.description} {row}: {row_error}")
                        stats.errors.append(
                            {"file": str(path), "row": row, "error": str(row_error)}
                        )
        return merged

    def _run_batch(self, rule: FileRule, batch: list[dict]) -> int:
        rows = self.store.run(rule.statement, {"rows": batch})
        return rows[0][0] if rows and rows[0] else 0
