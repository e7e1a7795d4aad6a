from marketplace.models.job import Job  # noqa: F401
from marketplace.models.proposal import Proposal  # noqa: F401
from marketplace.models.revoked_token import RevokedToken  # noqa: F401
from marketplace.models.user import User  # noqa: F401
