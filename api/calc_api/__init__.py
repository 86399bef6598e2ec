"""GraphQL API over the calculation engine."""
