"""GraphQL documents used by the client."""

USER_FIELDS = """
    id
    name
    createdAt
    lastSeen
"""

MESSAGE_FIELDS = """
    id
    content
    createdAt
    user {
      id
      name
    }
"""

GET_USERS = f"query GetUsers {{ users {{ {USER_FIELDS} }} }}"

GET_USER_BY_ID = f"query GetUserById($id: ID!) {{ user(id: $id) {{ {USER_FIELDS} }} }}"

CREATE_USER = f"mutation CreateUser($name: String!) {{ createUser(name: $name) {{ {USER_FIELDS} }} }}"

UPDATE_USER_LAST_SEEN = f"mutation UpdateUserLastSeen($id: ID!) {{ updateUserLastSeen(id: $id) {{ {USER_FIELDS} }} }}"

GET_MESSAGES = f"query GetMessages {{ messages {{ {MESSAGE_FIELDS} }} }}"

CREATE_MESSAGE = (
    "mutation CreateMessage($content: String!, $userId: ID!) "
    f"{{ createMessage(content: $content, userId: $userId) {{ {MESSAGE_FIELDS} }} }}"
)

MESSAGE_ADDED_SUBSCRIPTION = f"subscription MessageAdded {{ messageAdded {{ {MESSAGE_FIELDS} }} }}"

USER_JOINED_SUBSCRIPTION = f"subscription UserJoined {{ userJoined {{ {USER_FIELDS} }} }}"
