"""Social sign-in domain: provider dispatch, connections and pending sign-in attempts."""
