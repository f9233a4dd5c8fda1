"""Discovery, command building, process execution and result parsing."""
