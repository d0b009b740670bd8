from .commandgen.task_node import TaskGenerator

NODE_CLASS_MAPPINGS = {
    "TaskGenerator": TaskGenerator,
}

NODE_DISPLAY_NAME_MAPPINGS = {
    "TaskGenerator": "Task Generator 🤖",
}

def register_nodes(comfy):
    for name, cls in NODE_CLASS_MAPPINGS.items():
        display_name = NODE_DISPLAY_NAME_MAPPINGS.get(name, name)
        comfy.register_node(cls, display_name=display_name)
