"""Database models and data structures."""

from typing import List, Dict, Any
from dataclasses import dataclass, asdict
from datetime import datetime


@dataclass
class QueryResult:
    """One chunk of rows fetched from a result handle."""

    columns: List[str]
    rows: List[List[Any]]
    row_count: int
    execution_time: float
    query: str
    timestamp: datetime
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result to a dictionary."""
        return {
            "columns": self.columns,
            "rows": self.rows,
            "row_count": self.row_count,
            "execution_time": self.execution_time,
            "query": self.query,
            "timestamp": self.timestamp.isoformat(),
            "completed": self.completed
        }


@dataclass(frozen=True)
class ConnectionInfo:
    """Read-only description of a live session."""

    host: str
    user: str
    dbname: str
    con_type: str
    server_version: str
    protocol_version: int
    thread_id: int
    client: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert the info record to a dictionary."""
        return asdict(self)
