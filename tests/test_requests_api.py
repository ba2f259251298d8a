"""
Request endpoints: /api/justifications, /api/vacations, /api/permissions.

Tests:
  - test_employee_submits_own_request   : 201, pending
  - test_employee_cannot_submit_for_others
  - test_full_approval_over_http        : manager stage, then HR (admin only)
  - test_reject_then_approve_conflict   : 409, rejection reason returned
  - test_dcts_validation                : 409 before HR approval, admin only
  - test_unknown_request                : 404
  - test_employee_lists_only_own
"""

from __future__ import annotations

import uuid

from httpx import AsyncClient

from attendancehub.db.models import Employee


def _justification(employee: Employee) -> dict:
    return {
        "employee_id": str(employee.id),
        "date": "2026-01-13",
        "type": "tardanza",
        "description": "Transporte público detenido",
    }


class TestCreateRequests:
    async def test_employee_submits_own_request(
        self,
        client: AsyncClient,
        employee_headers: dict,
        employees: list[Employee],
    ) -> None:
        resp = await client.post(
            "/api/justifications/", json=_justification(employees[0]), headers=employee_headers
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["status"] == "pending"
        assert data["approval_flow"] == "pending"
        assert data["employee_name"] == employees[0].name

    async def test_employee_cannot_submit_for_others(
        self,
        client: AsyncClient,
        employee_headers: dict,
        employees: list[Employee],
    ) -> None:
        resp = await client.post(
            "/api/justifications/", json=_justification(employees[1]), headers=employee_headers
        )
        assert resp.status_code == 403, resp.text

    async def test_vacation_and_permission(
        self,
        client: AsyncClient,
        manager_headers: dict,
        employees: list[Employee],
    ) -> None:
        resp = await client.post(
            "/api/vacations/",
            json={"employee_id": str(employees[1].id), "start_date": "2026-02-02", "end_date": "2026-02-13"},
            headers=manager_headers,
        )
        assert resp.status_code == 201, resp.text
        assert resp.json()["days"] == 12

        resp = await client.post(
            "/api/permissions/",
            json={
                "employee_id": str(employees[1].id), "date": "2026-02-20", "type": "academic",
                "start_time": "14:00", "end_time": "18:00",
            },
            headers=manager_headers,
        )
        assert resp.status_code == 201, resp.text
        assert resp.json()["type"] == "academic"

    async def test_invalid_payload(
        self,
        client: AsyncClient,
        manager_headers: dict,
        employees: list[Employee],
    ) -> None:
        resp = await client.post(
            "/api/vacations/",
            json={"employee_id": str(employees[1].id), "start_date": "2026-02-13", "end_date": "2026-02-02"},
            headers=manager_headers,
        )
        assert resp.status_code == 422, resp.text

        resp = await client.post(
            "/api/permissions/",
            json={"employee_id": str(employees[1].id), "date": "2026-02-20", "type": "vacaciones"},
            headers=manager_headers,
        )
        assert resp.status_code == 422, resp.text


class TestApprovalEndpoints:
    async def test_full_approval_over_http(
        self,
        client: AsyncClient,
        employee_headers: dict,
        manager_headers: dict,
        admin_headers: dict,
        employees: list[Employee],
    ) -> None:
        created = await client.post(
            "/api/justifications/", json=_justification(employees[0]), headers=employee_headers
        )
        request_id = created.json()["id"]

        resp = await client.post(f"/api/justifications/{request_id}/approve/manager", headers=employee_headers)
        assert resp.status_code == 403, resp.text

        resp = await client.post(f"/api/justifications/{request_id}/approve/manager", headers=manager_headers)
        assert resp.status_code == 200, resp.text
        assert resp.json()["approval_flow"] == "manager_approved"

        resp = await client.post(f"/api/justifications/{request_id}/approve/hr", headers=manager_headers)
        assert resp.status_code == 403, resp.text

        resp = await client.post(f"/api/justifications/{request_id}/approve/hr", headers=admin_headers)
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["approval_flow"] == "completed"
        assert data["status"] == "approved"
        assert data["manager_approved"] is True
        assert data["hr_approved"] is True

    async def test_reject_then_approve_conflict(
        self,
        client: AsyncClient,
        manager_headers: dict,
        admin_headers: dict,
        employees: list[Employee],
    ) -> None:
        created = await client.post(
            "/api/vacations/",
            json={"employee_id": str(employees[2].id), "start_date": "2026-03-02", "end_date": "2026-03-03"},
            headers=manager_headers,
        )
        request_id = created.json()["id"]

        resp = await client.post(
            f"/api/vacations/{request_id}/reject", json={"reason": "Cierre de mes"}, headers=manager_headers
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["status"] == "rejected"
        assert data["rejection_reason"] == "Cierre de mes"

        resp = await client.post(f"/api/vacations/{request_id}/approve/hr", headers=admin_headers)
        assert resp.status_code == 409, resp.text

        # rejecting again is accepted and changes nothing
        resp = await client.post(f"/api/vacations/{request_id}/reject", headers=admin_headers)
        assert resp.status_code == 200, resp.text
        assert resp.json()["status"] == "rejected"

    async def test_dcts_validation(
        self,
        client: AsyncClient,
        employee_headers: dict,
        manager_headers: dict,
        admin_headers: dict,
        employees: list[Employee],
    ) -> None:
        created = await client.post(
            "/api/justifications/", json=_justification(employees[0]), headers=employee_headers
        )
        request_id = created.json()["id"]
        assert created.json()["dcts_validated"] is False

        resp = await client.post(f"/api/justifications/{request_id}/validate/dcts", headers=admin_headers)
        assert resp.status_code == 409, resp.text

        resp = await client.post(f"/api/justifications/{request_id}/approve/hr", headers=admin_headers)
        assert resp.status_code == 200, resp.text

        resp = await client.post(f"/api/justifications/{request_id}/validate/dcts", headers=manager_headers)
        assert resp.status_code == 403, resp.text

        resp = await client.post(f"/api/justifications/{request_id}/validate/dcts", headers=admin_headers)
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["dcts_validated"] is True
        assert data["status"] == "approved"

    async def test_unknown_request(self, client: AsyncClient, admin_headers: dict) -> None:
        resp = await client.post(f"/api/permissions/{uuid.uuid4()}/approve/hr", headers=admin_headers)
        assert resp.status_code == 404, resp.text


class TestListRequests:
    async def test_employee_lists_only_own(
        self,
        client: AsyncClient,
        employee_headers: dict,
        admin_headers: dict,
        employees: list[Employee],
    ) -> None:
        for employee in employees[:2]:
            resp = await client.post(
                "/api/justifications/", json=_justification(employee), headers=admin_headers
            )
            assert resp.status_code == 201, resp.text

        resp = await client.get("/api/justifications/", headers=employee_headers)
        assert resp.status_code == 200, resp.text
        assert [r["employee_id"] for r in resp.json()] == [str(employees[0].id)]

        resp = await client.get("/api/justifications/", params={"status": "pending"}, headers=admin_headers)
        assert len(resp.json()) == 2
