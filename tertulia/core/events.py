# Outcome statuses returned by mutating endpoints. The frontend keys its
# toasts and optimistic updates on these strings.

REACTION_CREATED = "reaction_created"
REACTION_REPLACED = "reaction_replaced"
REACTION_DELETED = "reaction_deleted"

FOLLOW_CREATED = "follow_created"
FOLLOW_DELETED = "follow_deleted"

BLOCK_CREATED = "block_created"
BLOCK_DELETED = "block_deleted"

POST_DELETED = "post_deleted"

COMMENT_DELETED = "comment_deleted"

INVITATION_DELETED = "invitation_deleted"

PASSWORD_UPDATED = "password_updated"
