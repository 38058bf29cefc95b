"""Test configuration."""

import os

os.environ["ENVIRONMENT"] = "testing"

# Guardrail: never let a developer's backend selection leak into tests.
for _variable in ("FEEDBACK_PROVIDER", "AI_PROVIDER"):
    os.environ.pop(_variable, None)
