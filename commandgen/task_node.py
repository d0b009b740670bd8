import os

from .catalog import DifficultyDegree, build_catalog_options, load_catalog
from .generator import generate_tasks
from .prototypes import load_prototype_file

TIER_LABELS = [d.name.lower() for d in DifficultyDegree if d != DifficultyDegree.NONE]


class TaskGenerator:
    """
    Generates robot task instructions from prototypes such as
      "bring the {object 1} from the {placement 1} to {name 1}"

    Several prototypes may be given, one per line (optional %w% weights,
    '#' comments); every task picks one. Left empty, the prototypes.txt of
    the selected catalog folder is used. Outputs the instructions one per
    line, and the metadata lines (hidden referents, meta: text) of all tasks.
    """

    def __init__(self):
        self._catalogs = {}

    @classmethod
    def INPUT_TYPES(cls):
        labels, _, tooltip = build_catalog_options()

        return {
            "required": {
                "prototype": ("STRING", {"multiline": True, "tooltip": "Task prototypes, one per line. Empty uses the catalog's prototypes.txt"}),
                "seed": ("INT", {"default": 0, "min": 0, "max": 0xffffffffffffffff}),
                "tier": (TIER_LABELS, {"default": "easy", "tooltip": "Hardest gestures, objects and questions allowed"}),
                "count": ("INT", {"default": 1, "min": 1, "max": 100}),
                "catalog": (labels, {"default": labels[0], "tooltip": tooltip}),
            },
        }

    RETURN_TYPES = ("STRING", "STRING")
    RETURN_NAMES = ("tasks", "metadata")
    FUNCTION = "generate"
    CATEGORY = "commandgen/generation"

    @staticmethod
    def _folder_for(label):
        _, mapping, _ = build_catalog_options()
        return mapping.get(label, mapping["catalogs"])

    def _catalog_for(self, folder):
        if folder not in self._catalogs:
            self._catalogs[folder] = load_catalog(folder)
        return self._catalogs[folder]

    def generate(self, prototype, seed, tier, count, catalog="catalogs"):
        folder = self._folder_for(catalog)

        prototypes = prototype
        if not prototype.strip():
            prototypes = load_prototype_file(os.path.join(folder, "prototypes.txt"))

        tasks = generate_tasks(
            prototypes,
            self._catalog_for(folder),
            seed=seed,
            tier=DifficultyDegree.parse(tier),
            count=count,
        )
        text = "\n".join(str(t) for t in tasks)
        metadata = "\n".join(line for t in tasks for line in t.metadata)
        return (text, metadata)
