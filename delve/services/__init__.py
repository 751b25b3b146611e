"""Simulation services: perception, pathfinding, combat, monster AI and turn scheduling."""
