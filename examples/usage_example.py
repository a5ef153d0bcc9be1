"""
Usage Examples for the Megaplan API SDK
Demonstrates configuration, both API generations and error handling
"""

import logging

from megaplan_api import (
    ApiError,
    ConfigLoader,
    ConfigValidator,
    LegacyClient,
    MegaplanClient,
    NonJsonResponseError,
    build_query_params,
    set_entity_field,
    set_raw_field,
)


# =============================================================================
# Example 1: Configuration from file, environment and code
# =============================================================================

def load_config_example():
    """
    Merge configuration from multiple sources
    Priority: programmatic > environment > file

    export MEGAPLAN_DOMAIN="example.megaplan.ru"
    export MEGAPLAN_TOKEN="your-access-token"
    """
    loader = ConfigLoader()
    return loader.load(
        file="./config/megaplan.json",
        env=True,
        config={"accept_gzip": True},
        require_credentials=True,
    )


# =============================================================================
# Example 2: Current API with a bearer token
# =============================================================================

def list_tasks_example(config) -> None:
    """Page through tasks until the server reports no next page"""
    with MegaplanClient(config) as client:
        params = {"limit": 50, "onlyRequestedFields": True}
        envelope = client.get("/api/v3/task", params)
        for task in envelope.data or []:
            print(task["id"], task.get("name"))

        while envelope.has_next():
            params["pageAfter"] = {"contentType": "Task", "id": envelope.data[-1]["id"]}
            envelope = client.get("/api/v3/task", params)
            for task in envelope.data or []:
                print(task["id"], task.get("name"))


def create_task_example(config) -> None:
    """Create a task and report field errors"""
    body = build_query_params(
        set_raw_field("name", "Quarterly report"),
        set_entity_field("responsible", "Employee", 1000005),
    )

    with MegaplanClient(config) as client:
        try:
            envelope = client.post("/api/v3/task", body)
            print("Created task", envelope.data["id"])
        except ApiError as e:
            print(f"Rejected:\n{e}")
        except NonJsonResponseError as e:
            print(f"Server answered HTTP {e.status_code}: {e}")


# =============================================================================
# Example 3: Legacy API with login and password
# =============================================================================

def legacy_example(config) -> None:
    """Obtain signing credentials and list tasks"""
    with LegacyClient.login(config, "user@example.com", "password") as client:
        result = client.call("GET", "/BumsTaskApiV01/Task/list.api", {"Folder": "owner", "Limit": 10})
        print(result.status.code, result.data)


# =============================================================================
# Example 4: Configuration Validation
# =============================================================================

def validation_example() -> None:
    """Validate configuration before use"""
    validator = ConfigValidator()

    result = validator.validate({"auth_scheme": "legacy", "timeout": 10}, require_credentials=True)

    if not result.valid:
        print("Configuration validation failed:")
        for error in result.errors:
            print(f"  - {error.field}: {error.message}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    print("=== Megaplan API Examples ===\n")
    validation_example()
