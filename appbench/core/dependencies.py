"""
FastAPI dependency injection module for the App Benchmark service.

Provides reusable dependencies for configuration and the reference table.
Both are created once by the application (see appbench.main.create_app and
its lifespan) and stored on ``app.state``; handlers receive them read-only.

Key Dependencies Provided:
- get_settings_dependency: Returns the Settings the app was created with
- get_reference_table: Returns the ReferenceTable loaded at startup
- SettingsDep: Type alias for injecting Settings into endpoints
- ReferenceTableDep: Type alias for injecting the ReferenceTable into endpoints

Usage Examples:
    @router.get("/benchmarks/{category}/{region}/{plan_type}")
    async def get_benchmarks(
        category: str,
        region: str,
        plan_type: str,
        reference_table: ReferenceTableDep,
    ) -> BenchmarkSnapshot:
        return reference_table.snapshot(category, region, plan_type)

Testing:
    Build the app with explicit settings instead of overriding dependencies:

        app = create_app(Settings(_env_file=None, strict_reference_keys=True))
"""

from typing import Annotated

from fastapi import Depends, Request

from appbench.core.config import Settings, get_settings
from appbench.services.reference_data import ReferenceTable


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency(request: Request) -> Settings:
    """
    Return the Settings bound to the running application.

    Falls back to the cached get_settings() singleton when the app was
    created without explicit settings.
    """
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


# =============================================================================
# Reference Table Dependency
# =============================================================================

def get_reference_table(request: Request) -> ReferenceTable:
    """
    Return the ReferenceTable loaded during application startup.

    Raises:
        RuntimeError: If called before the lifespan has loaded the table.
    """
    table = getattr(request.app.state, "reference_table", None)
    if table is None:
        raise RuntimeError("Reference table not loaded; application lifespan has not run")
    return table


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

# Usage: async def endpoint(reference_table: ReferenceTableDep)
ReferenceTableDep = Annotated[ReferenceTable, Depends(get_reference_table)]
