"""Disease/symptom risk graph: CSV builder, risk classifier and layout engine."""
