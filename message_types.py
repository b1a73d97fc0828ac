# client -> server
JOIN = "join"
RTC_OFFER = "rtc-offer"
RTC_ANSWER = "rtc-answer"
RTC_ICE = "rtc-ice"
KEYPOINTS = "keypoints"
HIT = "hit"
GAME_STATE = "game-state"

# Forwarded verbatim to the opponent
RELAY_TYPES = frozenset({RTC_OFFER, RTC_ANSWER, RTC_ICE, KEYPOINTS, HIT, GAME_STATE})

# server -> client
CONNECTED = "connected"
ROOM_CREATED = "room-created"
ROOM_JOINED = "room-joined"
PEER_JOINED = "peer-joined"
PEER_LEFT = "peer-left"
ERROR = "error"
