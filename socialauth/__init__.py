"""socialauth - social login dispatch and external account connection tracking."""
