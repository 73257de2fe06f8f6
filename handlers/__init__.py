# =============================================================================
# Relay Handler Package
# =============================================================================
#   handlers/
#   ├── base.py              # Response builders, JSON helpers
#   ├── webhook_security.py  # Token and signature verification
#   ├── slack_api.py         # conversations.info / getPermalink / postMessage
#   └── timeline.py          # Message filter pipeline and forwarding
#
# TO ADD A NEW INNER-EVENT HANDLER:
#   from src.runtime.dispatch import register
#
#   @register("reaction_added")
#   def handle_reaction(event, deps):
#       return ok_response()
#
#   and list the module in src.runtime.dispatch.HANDLER_MODULES.
# =============================================================================
