"""Person directory service (HTTP + gRPC over pluggable storage backends)."""
