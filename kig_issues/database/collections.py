# Partition keys, one per entity kind
PARTITIONS = {
    'users': 'User',
    'user_emails': 'UserEmail',
    'issues': 'Issue',
    'work_groups': 'WorkGroup',
    'tasks': 'Task',
    'activity': 'activity',
}

# Record Structure Documentation
# Fields listed under 'json' are stored as serialized strings in the flat record.
COLLECTION_SCHEMAS = {
    'users': {
        'fields': ['email', 'name', 'role', 'phone', 'workGroup', 'profilePicture', 'passwordHash', 'createdAt', 'updatedAt'],
        'required': ['email', 'name', 'role'],
        'json': [],
    },
    'user_emails': {
        'fields': ['userId', 'createdAt'],
        'required': ['userId'],
        'json': [],
    },
    'issues': {
        'fields': ['title', 'description', 'category', 'status', 'priority', 'location', 'photos', 'reportedBy',
                   'assignedTo', 'workGroup', 'resolvedAt', 'estimatedCost', 'donationGoal', 'donationsReceived',
                   'createdAt', 'updatedAt'],
        'required': ['title', 'description', 'category', 'status', 'priority', 'location', 'reportedBy'],
        'json': ['location', 'photos'],
    },
    'work_groups': {
        'fields': ['name', 'description', 'leaderId', 'members', 'area', 'specialization', 'category', 'isActive',
                   'contactInfo', 'createdAt', 'updatedAt'],
        'required': ['name', 'leaderId'],
        'json': ['members', 'specialization', 'contactInfo'],
    },
    'tasks': {
        'fields': ['title', 'description', 'workGroupId', 'assignedTo', 'status', 'priority', 'dueDate', 'issueId',
                   'createdBy', 'completedAt', 'createdAt', 'updatedAt'],
        'required': ['title', 'workGroupId', 'status', 'priority', 'createdBy'],
        'json': [],
    },
    'activity': {
        'fields': ['id', 'type', 'description', 'userId', 'relatedId', 'beforeData', 'afterData', 'createdAt'],
        'required': ['type', 'description', 'userId'],
        'json': ['beforeData', 'afterData'],
    },
}


def collection_name(kind: str, prefix: str = "") -> str:
    """Physical collection name for an entity kind."""
    return f"{prefix}{PARTITIONS[kind]}"
