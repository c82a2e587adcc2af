"""Development server implementing the PlanIT backend contract in memory."""
