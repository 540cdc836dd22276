# Message type constants (stringly-typed protocol; canonical list lives here)

# client -> server
T_STROKE_START = "stroke_start"
T_STROKE_MOVE = "stroke_move"
T_STROKE_END = "stroke_end"
T_UNDO = "undo"
T_REDO = "redo"
T_CURSOR = "cursor"

# server -> clients
T_SYNC = "sync"
T_STREAM_START = "stream_start"
T_STREAM_MOVE = "stream_move"
T_STREAM_END = "stream_end"
T_OPERATION = "operation"
# T_UNDO, T_REDO and T_CURSOR are reused for the broadcasts.

# operation kinds
OP_ADD_STROKE = "ADD_STROKE"
OP_REMOVE_STROKE = "REMOVE_STROKE"

DEFAULT_PRESSURE = 0.5
