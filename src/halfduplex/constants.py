from __future__ import annotations

# RFC 854 command bytes
IAC = 255
DONT = 254
DO = 253
WONT = 252
WILL = 251
SB = 250
GA = 249
EL = 248
EC = 247
AYT = 246
AO = 245
IP = 244
BRK = 243
DM = 242
NOP = 241
SE = 240

PING_OPTION_MIN = 40
PING_OPTION_MAX = 239  # inclusive
DEFAULT_PING_OPTION = 99

DEFAULT_CHUNK_SIZE = 4096
DEFAULT_PORT = 23
DEFAULT_CONNECT_TIMEOUT_S = 10.0
