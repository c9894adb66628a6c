"""Administrative boundary resolution for the Nagarjun map story."""
