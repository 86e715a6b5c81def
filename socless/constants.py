VAULT_TOKEN = "vault:"
PATH_TOKEN = "$."
CONVERSION_TOKEN = "!"

LAST_SAVED_RESULTS_KEY = "_Last_Saved_Results"
DIRECT_INVOKE_STATE_NAME = "direct_invoke"

MAX_RESOLUTION_DEPTH = 64

STATE_MACHINE_ARN_TEMPLATE = "arn:aws:states:{region}:{account_id}:stateMachine:{playbook}"

EVENT_STATUS_OPEN = "open"
EVENT_STATUS_CLOSED = "closed"
