# src/formview/seeder.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from .errors import SeedError
from .fixtures import SeedPlan, build_column_definition
from .instrumentation import Cat, format_ctx
from .. import config

AUTH_HEADER = "xc-auth"
HTTP_TIMEOUT_S = 30


class FixtureSeeder:
    """
    Creates projects, tables, rows and link columns through the backend API so
    scenarios start from known data without driving the UI.

    One seeder per scenario; it owns its own requests.Session.
    """

    def __init__(
        self,
        api_url: str | None = None,
        *,
        token: str | None = None,
        http: requests.Session | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.api_url = (api_url or config.FV_API_URL).rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.logger = logger or logging.getLogger("formview")
        self.token: str | None = None
        if token:
            self.set_token(token)

    def _log(self, level: str, msg: str, **ctx: Any) -> None:
        c = format_ctx(**ctx)
        line = f"[{Cat.SEED.value}] {msg} :: {c}" if c else f"[{Cat.SEED.value}] {msg}"
        getattr(self.logger, level, self.logger.info)(line)

    def set_token(self, token: str) -> None:
        self.token = token
        self.http.headers[AUTH_HEADER] = token

    def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        url = f"{self.api_url}{path}"
        try:
            resp = self.http.request(method, url, json=json, timeout=HTTP_TIMEOUT_S)
        except requests.RequestException as e:
            self._log("error", f"Request failed: {e!r}", method=method, path=path)
            raise SeedError(method, path, None, str(e)) from e

        if resp.status_code >= 400:
            self._log("error", "API call rejected", method=method, path=path, status=resp.status_code)
            raise SeedError(method, path, resp.status_code, resp.text or "")

        self._log("debug", "API call ok", method=method, path=path, status=resp.status_code)
        if not resp.content:
            return None
        return resp.json()

    # ------------------------------------------------------------------
    # Auth + project
    # ------------------------------------------------------------------

    def sign_in(self, email: str | None = None, password: str | None = None) -> str:
        data = self._request(
            "POST",
            "/api/v1/auth/user/signin",
            json={
                "email": email or config.FV_USER_EMAIL,
                "password": password or config.FV_USER_PASSWORD,
            },
        )
        token = (data or {}).get("token")
        if not token:
            raise SeedError("POST", "/api/v1/auth/user/signin", 200, "response carried no token")
        self.set_token(token)
        self._log("info", "Signed in", a=email or config.FV_USER_EMAIL)
        return token

    def create_project(self, title: str) -> Dict[str, Any]:
        project = self._request("POST", "/api/v1/db/meta/projects/", json={"title": title})
        self._log("info", "Project created", a=title, project=project.get("id"))
        return project

    def read_project(self, project_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/v1/db/meta/projects/{project_id}")

    def default_base_id(self, project_id: str) -> str:
        bases = self.read_project(project_id).get("bases") or []
        if not bases:
            raise SeedError("GET", f"/api/v1/db/meta/projects/{project_id}", 200, "project has no bases")
        return bases[0]["id"]

    # ------------------------------------------------------------------
    # Tables, rows, links
    # ------------------------------------------------------------------

    def create_table(
        self,
        project_id: str,
        base_id: str,
        title: str,
        columns: List[Dict[str, Any]],
        *,
        table_name: str | None = None,
    ) -> Dict[str, Any]:
        table = self._request(
            "POST",
            f"/api/v1/db/meta/projects/{project_id}/{base_id}/tables",
            json={"table_name": table_name or title, "title": title, "columns": columns},
        )
        self._log("info", "Table created", a=title, table=table.get("id"))
        return table

    def bulk_create_rows(self, project_id: str, table_id: str, rows: Iterable[Dict[str, Any]]) -> Any:
        rows = list(rows)
        if not rows:
            return []
        out = self._request(
            "POST",
            f"/api/v1/db/data/bulk/{config.API_ORG}/{project_id}/{table_id}",
            json=rows,
        )
        self._log("info", f"Inserted {len(rows)} row(s)", table=table_id)
        return out

    def create_link_column(
        self,
        parent_id: str,
        child_id: str,
        title: str,
        *,
        type: str = "hm",
        column_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        out = self._request(
            "POST",
            f"/api/v1/db/meta/tables/{parent_id}/columns",
            json={
                "column_name": column_name or title,
                "title": title,
                "uidt": "LinkToAnotherRecord",
                "parentId": parent_id,
                "childId": child_id,
                "type": type,
            },
        )
        self._log("info", "Link column created", a=title, parent=parent_id, child=child_id, rel=type)
        return out

    def seed_plan(self, project_id: str, plan: SeedPlan, *, base_id: str | None = None) -> Dict[str, Dict[str, Any]]:
        """
        Create every table in plan order, insert its rows, then add the links.
        Returns the created tables keyed by title.
        """
        base = base_id or self.default_base_id(project_id)
        tables: Dict[str, Dict[str, Any]] = {}
        for t in plan.tables:
            columns = [build_column_definition(c) for c in t.columns]
            tables[t.title] = self.create_table(project_id, base, t.title, columns, table_name=t.table_name)
            self.bulk_create_rows(project_id, tables[t.title]["id"], t.rows)
        for link in plan.links:
            self.create_link_column(tables[link.parent]["id"], tables[link.child]["id"], link.title, type=link.type)
        self._log("info", "Seed plan applied", a=plan.name, tables=len(tables), links=len(plan.links))
        return tables

    def close(self) -> None:
        self.http.close()
