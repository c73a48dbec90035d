# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Gridbase API:
# - test_cells.py / test_ordering.py / test_limits.py: Pure helpers
# - test_workspaces.py / test_grid.py: Workspace, base and grid services
# - test_subscription.py / test_projects.py: Plans, usage and projects
# - test_builder.py / test_marketplace.py / test_export.py
# - test_auth.py / test_api.py: Token checks and HTTP endpoints
#
# Run tests with: pytest
# =============================================================================
