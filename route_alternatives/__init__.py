"""Route alternatives: diversified routing, selection state and LLM comparison."""
