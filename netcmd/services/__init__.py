# Service layer for the netcmd UDP commander
# - transport:     owned controller for the client (Sender) and receive (Listener) sockets
# - events:        observer interface and fan-out channel for log/status events
# - command_store: named hex command library with JSON import/export blobs
# - dispatcher:    single, batch and repeating sends of stored commands
