"""Template repository using SQLite."""
import json

from pydantic import BaseModel, Field

from recruitops_core.db import DEFAULT_BUSY_TIMEOUT, get_conn, init_db
from recruitops_core.util import ValidationError, generate_id, utc_now_iso


class Template(BaseModel):
    """A personalization template."""

    id: str
    name: str
    type: str
    base_template: str
    variables: list[str] = Field(default_factory=list)
    is_active: bool = True
    usage_count: int = 0
    created_at: str | None = None


def _template_from_row(row) -> Template:
    data = dict(row)
    data["type"] = data.pop("template_type")
    data["variables"] = json.loads(data.get("variables") or "[]")
    return Template(**data)


class TemplateRepository:
    """Admin operations for message templates."""

    def __init__(self, sqlite_path: str, busy_timeout: float = DEFAULT_BUSY_TIMEOUT):
        self.sqlite_path = sqlite_path
        self.busy_timeout = busy_timeout
        init_db(sqlite_path, busy_timeout)

    def _conn(self):
        return get_conn(self.sqlite_path, self.busy_timeout)

    def create(self, name: str, type: str, base_template: str, variables: list[str] | None = None) -> Template:
        """Create a template."""
        if not name or not type or not base_template:
            raise ValidationError("name, type, and base_template are required")
        template_id = generate_id("tpl")
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO personalization_templates
                    (id, name, template_type, base_template, variables, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (template_id, name, type, base_template, json.dumps(variables or []), utc_now_iso()),
            )
        return self.get(template_id)

    def get(self, template_id: str) -> Template | None:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM personalization_templates WHERE id = ?", (template_id,)
            ).fetchone()
            return _template_from_row(row) if row else None

    def list(self, type: str | None = None) -> list[Template]:
        """Active templates, most used first, then newest."""
        sql = "SELECT * FROM personalization_templates WHERE is_active = 1"
        params: list = []
        if type:
            sql += " AND template_type = ?"
            params.append(type)
        sql += " ORDER BY usage_count DESC, created_at DESC"
        with self._conn() as conn:
            return [_template_from_row(r) for r in conn.execute(sql, params).fetchall()]

    def record_use(self, template_id: str):
        with self._conn() as conn:
            conn.execute(
                "UPDATE personalization_templates SET usage_count = usage_count + 1 WHERE id = ?",
                (template_id,),
            )
