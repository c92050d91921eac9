"""Domain layer: records, entities, matching rules and ports."""
