from ink_diffuser.viewer import launch_viewer

if __name__ == "__main__":
    launch_viewer()
