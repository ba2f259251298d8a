"""
Department org charts built from configured positions.

Positions are keyed by name inside a department. A position hangs under its
``reports_to`` parent when that parent exists in the same department and
becomes a root otherwise, so a dangling or cyclic reference never drops a
node from the chart.
"""

from collections import defaultdict
from collections.abc import Iterable

from attendancehub.db.models import DepartmentPosition, Employee
from attendancehub.schemas.employee import DepartmentChart, OrgChartEmployee, OrgChartNode
from attendancehub.schemas.payload import coerce_str_list


def _key(name: str | None) -> str:
    return (name or "").strip().casefold()


def _department_chart(
    department: str,
    positions: list[DepartmentPosition],
    employees: list[Employee],
) -> DepartmentChart:
    nodes: dict[str, OrgChartNode] = {}
    parents: dict[str, str] = {}
    for position in positions:
        key = _key(position.position_name)
        nodes[key] = OrgChartNode(
            position_name=position.position_name,
            description=position.description,
            responsibilities=coerce_str_list(position.responsibilities),
            max_positions=position.max_positions,
            is_leadership=position.is_leadership,
        )
        if position.reports_to:
            parents[key] = _key(position.reports_to)

    chart = DepartmentChart(department=department)
    for employee in sorted(employees, key=lambda e: e.name):
        entry = OrgChartEmployee(id=employee.id, name=employee.name, document_id=employee.document_id)
        node = nodes.get(_key(employee.position))
        if node is None:
            chart.unassigned.append(entry)
        else:
            node.employees.append(entry)

    for key, node in nodes.items():
        parent = parents.get(key)
        if parent and parent != key and parent in nodes and not _is_ancestor(key, parent, parents):
            nodes[parent].children.append(node)
        else:
            chart.roots.append(node)
    return chart


def _is_ancestor(key: str, candidate: str, parents: dict[str, str]) -> bool:
    """True when ``key`` already sits above ``candidate`` in the reporting chain."""
    seen = set()
    current = parents.get(candidate)
    while current and current not in seen:
        if current == key:
            return True
        seen.add(current)
        current = parents.get(current)
    return False


def build_org_chart(
    positions: Iterable[DepartmentPosition],
    employees: Iterable[Employee],
    department: str | None = None,
) -> list[DepartmentChart]:
    """One chart per department; only ``active`` employees are placed."""
    positions_by_dept: dict[str, list[DepartmentPosition]] = defaultdict(list)
    for position in positions:
        positions_by_dept[position.department].append(position)

    employees_by_dept: dict[str, list[Employee]] = defaultdict(list)
    for employee in employees:
        if employee.status == "active":
            employees_by_dept[employee.department].append(employee)

    departments = sorted(set(positions_by_dept) | set(employees_by_dept))
    if department is not None:
        departments = [d for d in departments if d == department]

    return [
        _department_chart(d, positions_by_dept.get(d, []), employees_by_dept.get(d, []))
        for d in departments
    ]
