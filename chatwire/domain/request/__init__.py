# This module handles Chat Completions request assembly

# +---------------------+
# |   Conversation      |   (ResponseItem sequence, never mutated)
# |---------------------|
# | Messages            |
# | Tool calls/outputs  |
# | Reasoning traces    |
# | Markers             |
# +---------------------+
#         |
#         v
# +---------------------+      +------------------------------+
# |   Role tracker      | ---> |     Reasoning resolver       |
# | (last emitted role) |      | (position -> attachment map) |
# +---------------------+      +------------------------------+
#                                          |
#                                          v
#                              +------------------------------+
#                              |      Message assembler       |
#                              | (wire messages, dedup, fold) |
#                              +------------------------------+
#                                          |
#                                          v
#                              +------------------------------+
#                              |     ChatRequestBuilder       |
#                              | (body, reasoning controls,   |
#                              |  conversation headers)       |
#                              +------------------------------+
