"""League admin backend: league/team management and round-robin fixture generation."""
