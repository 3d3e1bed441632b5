from ._control_path import create_path_builder
