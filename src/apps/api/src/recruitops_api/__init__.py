"""HTTP API for recruiting bulk actions."""
