"""Error handling patterns with recovery hints.

This example demonstrates how to handle export errors on the server side
and use the recovery_hint property to provide actionable guidance.
"""

from dashfeed import (
    AuthError,
    ConfigurationError,
    DashfeedError,
    DatasetNotFoundError,
    DatasetService,
    ExportError,
    ExportTimeoutError,
    Settings,
)


service = DatasetService.from_settings(Settings.from_env())


# Pattern 1: Handle unknown dataset names
def export_with_suggestions(name: str) -> str:
    """Export a dataset with helpful error messages."""
    try:
        return service.get_dataset_csv(name)
    except DatasetNotFoundError as e:
        # recovery_hint lists registered datasets
        print(f"Dataset '{name}' not found.")
        print(f"Hint: {e.recovery_hint}")
        raise


# Pattern 2: Missing variables are reported at first use
def export_if_configured(name: str) -> str | None:
    """Export a dataset, returning None if its variables are not set."""
    try:
        return service.get_dataset_csv(name)
    except ConfigurationError as e:
        print(f"Not configured: {e.setting}")
        print(f"Hint: {e.recovery_hint}")
        return None


# Pattern 3: Distinguish auth, timeout and other export failures
def export_with_diagnostics(name: str) -> str | None:
    """Export a dataset, reporting why it failed."""
    try:
        return service.get_dataset_csv(name)
    except AuthError as e:
        print(f"Token refresh rejected ({e.status_code}): {e.body}")
    except ExportTimeoutError as e:
        print(f"Job {e.job_id} still running after {e.attempts} checks")
    except ExportError as e:
        print(f"Export of view {e.resource_id} failed: {e}")
    return None


# Pattern 4: Catch everything from the library
def export_safely(name: str) -> str | None:
    """Export a dataset, catching any dashfeed error."""
    try:
        return service.get_dataset_csv(name)
    except DashfeedError as e:
        print(f"Error: {e}")
        if e.recovery_hint:
            print(f"Hint: {e.recovery_hint}")
        return None


if __name__ == "__main__":
    export_safely("billing")
