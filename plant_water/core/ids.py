"""
Ownership tags for graphs.

Every node records the tag of the graph that created it, which lets a
graph reject nodes that belong to another graph.
"""


class IDGenerator:
    """Monotonic integer tag source."""
    
    def __init__(self, start_id: int = 0):
        self.current_id = start_id
    
    def next_id(self) -> int:
        """Consume and return the next tag."""
        tag = self.current_id
        self.current_id += 1
        return tag
    
    def peek_next_id(self) -> int:
        """Next tag, without consuming it."""
        return self.current_id


GRAPH_IDS = IDGenerator(start_id=1)
