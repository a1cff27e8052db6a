"""Static deployment configuration.

The assemblies that make up the TPL Dataflow debugger visualizer and the
folder Visual Studio loads visualizers from.
"""
import sys
from pathlib import Path

# Visualizer assembly first, then its dependencies
VISUALIZER_ASSEMBLY_NAMES = (
    'TPLDataFlowDebuggerVisualizer.dll',
    'GraphSharp.dll',
    'GraphSharp.Controls.dll',
    'QuickGraph.Data.dll',
    'QuickGraph.dll',
    'QuickGraph.Graphviz.dll',
    'QuickGraph.Serialization.dll',
    'WPFExtensions.dll',
)

VISUALIZERS_SUBFOLDER = 'Visualizers'


def visualizers_dir(visual_studio_dir):
    """Destination folder for visualizers below the Visual Studio user dir"""
    return Path(visual_studio_dir) / VISUALIZERS_SUBFOLDER


def default_source_dir():
    """Folder the assemblies ship in: next to the launched script"""
    script = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
    if script and script.parent.is_dir() and str(script.parent) not in ('', '.'):
        return script.resolve().parent
    return Path.cwd()


def load_file_list(path):
    """Read a file list: one file name per line, '#' starts a comment"""
    names = []
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.split('#', 1)[0].strip()
            if line:
                names.append(line)
    return tuple(names)
