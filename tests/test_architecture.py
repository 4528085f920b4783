"""Architectural boundary tests using pytest-archon.

These tests verify that the codebase follows clean architecture principles:
- Domain layer has no dependencies on adapters
- Application services don't depend on adapters
- Adapters can depend on domain
- No circular dependencies
"""

from pytest_archon import archrule


def test_domain_models_have_no_dependencies() -> None:
    """Domain models should only import the standard library, models and timestamps."""
    (
        archrule("domain models", comment="Domain models should be independent")
        .match("ns_planner.domain.models*")
        .should_not_import("ns_planner.adapters*")
        .should_not_import("ns_planner.application*")
        .should_not_import("ns_planner.domain.contracts*")
        .should_not_import("ns_planner.domain.ports*")
        .may_import("ns_planner.domain.models*")
        .may_import("ns_planner.domain.timestamps")
        .check("ns_planner")
    )


def test_domain_contracts_have_no_dependencies() -> None:
    """Domain contracts (protocols/interfaces) should not import adapters or application."""
    (
        archrule("domain contracts", comment="Domain contracts should be independent")
        .match("ns_planner.domain.contracts*")
        .should_not_import("ns_planner.adapters*")
        .should_not_import("ns_planner.application*")
        .may_import("ns_planner.domain*")
        .check("ns_planner")
    )


def test_domain_ports_have_no_dependencies() -> None:
    """Domain ports (interfaces) should not import adapters or application."""
    (
        archrule("domain ports", comment="Domain ports should be independent")
        .match("ns_planner.domain.ports*")
        .should_not_import("ns_planner.adapters*")
        .should_not_import("ns_planner.application*")
        .may_import("ns_planner.domain*")
        .check("ns_planner")
    )


def test_application_services_dont_import_adapters() -> None:
    """Application services should not depend on adapters (infrastructure layer)."""
    (
        archrule(
            "application services", comment="Application services should not depend on adapters"
        )
        .match("ns_planner.application*")
        .should_not_import("ns_planner.adapters*")
        .should_not_import("ns_planner.wiring")
        .may_import("ns_planner.domain*")
        .may_import("ns_planner.application*")
        .check("ns_planner")
    )


def test_adapters_dont_import_application() -> None:
    """Adapters should not import application services (to avoid cycles)."""
    (
        archrule(
            "adapters independence", comment="Adapters should not depend on application services"
        )
        .match("ns_planner.adapters*")
        .should_not_import("ns_planner.application*")
        .may_import("ns_planner.domain*")
        .may_import("ns_planner.adapters*")
        .check("ns_planner", only_direct_imports=True)
    )


def test_no_circular_dependencies_in_domain() -> None:
    """Domain layer should not have circular dependencies."""
    (
        archrule("domain no cycles", comment="Domain layer should not have circular dependencies")
        .match("ns_planner.domain*")
        .should_not_import("ns_planner.adapters*")
        .should_not_import("ns_planner.application*")
        .should_not_import("ns_planner.wiring")
        .may_import("ns_planner.domain*")
        .check("ns_planner", only_direct_imports=True)
    )


def test_cli_dont_import_web_adapters() -> None:
    """CLI should not import web adapters to allow running CLI without web server."""
    (
        archrule("CLI independence", comment="CLI should not depend on web adapters")
        .match("ns_planner.cli")
        .should_not_import("ns_planner.adapters.web*")
        .may_import("ns_planner.domain*")
        .may_import("ns_planner.application*")
        .may_import("ns_planner.adapters*")
        .may_import("ns_planner.wiring")
        .check("ns_planner")
    )
