"""Survey flow service: conditional question visibility and completion.

Business logic lives in `survey_flow/logic/`, route handlers in
`survey_flow/routes/`, and the browser copy of the visibility rules in
`survey_flow/static/conditional_flow.js`.
"""

from __future__ import annotations

from survey_flow.main import create_app

__all__ = ["create_app"]
